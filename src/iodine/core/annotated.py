"""
Annotated errors: an underlying error plus an append-only stack of entries.

Typical use along a propagation path::

    try:
        store_object(bucket, key)
    except OSError as exc:
        raise iodine.new(exc, {"bucket": bucket}) from exc

    # one layer up
    except iodine.AnnotatedError as err:
        raise err.annotate({"request": request_id})

Each ``new``/``annotate`` call captures one :class:`StackEntry` for the line
that made it. ``wrap`` does either, depending on what it is given, so every
layer can use the same call.

The embedded error is treated as immutable once wrapped: ``error_message`` is
read from it once at construction and ``error()`` reads it again on demand.
The two agree as long as the embedded error does not change its message.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .capture import CallSite, capture_entry
from .context import ContextStore
from .entry import StackEntry
from .render import ErrorReport, encode_report, format_human_readable


class AnnotatedError(Exception):
    """
    An error enriched with an ordered history of stack entries.

    Attributes
    ----------
    embedded_error : object
        The wrapped error. Only its message (``str()``) is ever used.
    error_message : str
        Message of ``embedded_error`` cached at construction.
    """

    def __init__(self, embedded_error: object, entry: StackEntry) -> None:
        self.embedded_error = embedded_error
        self.error_message: str = str(embedded_error)
        self._stack: list[StackEntry] = [entry]
        super().__init__(self.error_message)
        if isinstance(embedded_error, BaseException):
            self.__cause__ = embedded_error

    def __reduce__(self) -> tuple[Any, ...]:
        # The default rebuilds from args (the message only); rebuild from the stack.
        return (_restore, (self.embedded_error, self.error_message, tuple(self._stack)))

    @property
    def stack(self) -> tuple[StackEntry, ...]:
        """Captured entries, oldest first."""
        return tuple(self._stack)

    def annotate(
        self,
        info: Mapping[str, object] | None = None,
        *,
        store: ContextStore | None = None,
        location: CallSite | None = None,
        stacklevel: int = 1,
    ) -> AnnotatedError:
        """
        Append one stack entry for the calling line and return ``self``.

        Parameters
        ----------
        info : Mapping[str, object] | None
            Extra context for this entry; overrides store keys of the same name.
        store : ContextStore | None
            Store to snapshot instead of the active one.
        location : CallSite | None
            Explicit call site to record.
        stacklevel : int
            1 records the caller of ``annotate``; helpers add one per layer.
        """
        entry = capture_entry(info, store=store, depth=stacklevel, location=location)
        self._stack.append(entry)
        return self

    def error(self) -> str:
        """Return the embedded error's message."""
        return str(self.embedded_error)

    def __str__(self) -> str:
        return self.error()

    def __repr__(self) -> str:
        return f"AnnotatedError({self.embedded_error!r}, entries={len(self._stack)})"

    # ------------------------------- Rendering ------------------------------

    def report(self) -> ErrorReport:
        """Return the structured form used for JSON output."""
        return ErrorReport(error_message=self.error_message, stack=list(self._stack))

    def emit_json(self, indent: int | None = None) -> bytes:
        """
        Encode ``ErrorMessage`` and ``Stack`` as JSON bytes.

        Raises
        ------
        iodine.errors.SerializationError
            If the encoder fails.
        """
        return encode_report(self.report(), indent=indent)

    def emit_human_readable(self) -> str:
        """Return the message line followed by one line per stack entry."""
        return format_human_readable(self.error(), self._stack)


def _restore(
    embedded_error: object, error_message: str, stack: Sequence[StackEntry]
) -> AnnotatedError:
    """Rebuild a pickled or copied :class:`AnnotatedError`."""
    err = AnnotatedError(embedded_error, stack[0])
    err.error_message = error_message
    err._stack.extend(stack[1:])
    return err


def new(
    err: object,
    data: Mapping[str, object] | None = None,
    *,
    store: ContextStore | None = None,
    location: CallSite | None = None,
    stacklevel: int = 1,
) -> AnnotatedError:
    """
    Wrap ``err`` in an :class:`AnnotatedError` with one stack entry.

    ``err`` must not be ``None``. ``data`` is merged into the entry over the
    store snapshot. ``stacklevel`` behaves as in :meth:`AnnotatedError.annotate`.
    """
    entry = capture_entry(data, store=store, depth=stacklevel, location=location)
    return AnnotatedError(err, entry)


def wrap(
    err: object,
    data: Mapping[str, object] | None = None,
    *,
    store: ContextStore | None = None,
    location: CallSite | None = None,
    stacklevel: int = 1,
) -> AnnotatedError:
    """Annotate ``err`` if it is already an :class:`AnnotatedError`, else wrap it."""
    if isinstance(err, AnnotatedError):
        return err.annotate(data, store=store, location=location, stacklevel=stacklevel + 1)
    return new(err, data, store=store, location=location, stacklevel=stacklevel + 1)


__all__ = ["AnnotatedError", "new", "wrap"]
