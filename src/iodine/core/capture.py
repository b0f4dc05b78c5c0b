"""
Stack entry capture.

:func:`capture_entry` records "where, on which host, with what context" at the
moment an error is wrapped or annotated. It never raises: a host name that
cannot be resolved becomes ``""`` and a call site that cannot be inspected
becomes ``("", 0)``.

Call sites
----------
The recorded location is found by walking up the interpreter stack, the same
way ``warnings.warn(stacklevel=...)`` does. ``depth=1`` means "the caller of
the function that called ``capture_entry``", which is what ``new`` and
``annotate`` want. Helpers that add a layer pass ``depth + 1``; callers that
know their location better can pass an explicit :class:`CallSite` instead.
"""

from __future__ import annotations

import socket
import sys
from collections.abc import Callable, Mapping
from typing import NamedTuple

from .context import ContextStore, active_store
from .entry import StackEntry
from .settings import get_logger, load_settings

logger = get_logger("iodine.capture")

HostResolver = Callable[[], str]


class CallSite(NamedTuple):
    """Source location of a wrap/annotate call."""

    file: str
    line: int


def _as_text(value: object) -> str:
    """Return ``str(value)``, or a placeholder when ``__str__`` itself fails."""
    try:
        return str(value)
    except Exception as exc:
        logger.warning("Unprintable context value of type %s: %s", type(value).__name__, exc)
        return f"<unprintable {type(value).__name__}>"


def resolve_host() -> str:
    """Return the configured host override or the local host name, else ``""``."""
    override = load_settings().host
    if override:
        return override
    try:
        return socket.gethostname()
    except OSError as exc:
        logger.warning("Could not resolve host name: %s", exc)
        return ""


def resolve_call_site(depth: int = 1) -> CallSite:
    """
    Return the location ``depth`` frames above the function calling this one.

    ``depth=0`` is the calling function itself. A stack shallower than
    requested yields ``CallSite("", 0)``.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return CallSite("", 0)
    return CallSite(frame.f_code.co_filename, frame.f_lineno)


def capture_entry(
    data: Mapping[str, object] | None = None,
    *,
    store: ContextStore | None = None,
    depth: int = 1,
    location: CallSite | None = None,
    host_resolver: HostResolver | None = None,
) -> StackEntry:
    """
    Build a :class:`StackEntry` for the current call site.

    Parameters
    ----------
    data : Mapping[str, object] | None
        Caller-supplied context. Applied after the store snapshot, so these
        values win on key collisions. Keys and values are coerced with ``str``.
    store : ContextStore | None
        Store to snapshot. Defaults to :func:`active_store`.
    depth : int
        Frames above the caller of ``capture_entry`` to record (see module docs).
    location : CallSite | None
        Explicit call site; skips stack inspection entirely.
    host_resolver : HostResolver | None
        Zero-argument callable returning the host name. Defaults to
        :func:`resolve_host`.

    Returns
    -------
    StackEntry
        A frozen entry whose ``data`` is owned by the entry alone.
    """
    resolver = host_resolver or resolve_host
    try:
        host = resolver()
    except Exception as exc:
        logger.warning("Host resolver failed: %s", exc)
        host = ""

    site = location if location is not None else resolve_call_site(depth + 1)

    merged = (store if store is not None else active_store()).snapshot()
    if data:
        merged.update({_as_text(k): _as_text(v) for k, v in data.items()})

    logger.debug("Captured stack entry at %s:%d (%d keys)", site.file, site.line, len(merged))
    return StackEntry(host=host, file=site.file, line=site.line, data=merged)


__all__ = ["CallSite", "HostResolver", "resolve_host", "resolve_call_site", "capture_entry"]
