"""Unit tests for stack entry capture: host, call site and context merging."""

from __future__ import annotations

import inspect
import socket
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from iodine.core.capture import CallSite, capture_entry, resolve_call_site, resolve_host
from iodine.core.context import ContextStore, get_global_state, set_global_state, use_store
from iodine.core.entry import StackEntry
from iodine.core.settings import load_settings


def _capture_here(**kwargs: Any) -> StackEntry:
    """Stand-in for `new`/`annotate`: records the line that called it."""
    return capture_entry(**kwargs)


def _this_line() -> int:
    frame = inspect.currentframe()
    assert frame is not None and frame.f_back is not None
    return frame.f_back.f_lineno


def test_capture_records_callers_call_site() -> None:
    """`depth=1` records the site that invoked the capturing function."""
    expected = _this_line() + 1
    entry = _capture_here()
    assert entry.line == expected
    assert Path(entry.file).name == Path(__file__).name


def test_explicit_location_skips_inspection() -> None:
    """A caller-supplied `CallSite` is recorded verbatim."""
    entry = _capture_here(location=CallSite("handlers/put.py", 12))
    assert (entry.file, entry.line) == ("handlers/put.py", 12)


def test_resolve_call_site_too_deep_degrades() -> None:
    """Asking for a frame beyond the stack yields an empty location."""
    assert resolve_call_site(10_000) == CallSite("", 0)


def test_caller_data_overrides_store_without_mutating_it() -> None:
    """Caller values win on collision and the store keeps its own value."""
    set_global_state("bucket", "global")
    set_global_state("request", "r-1")
    entry = _capture_here(data={"bucket": "local", "attempt": 3})
    assert entry.data == {"bucket": "local", "request": "r-1", "attempt": "3"}
    assert get_global_state() == {"bucket": "global", "request": "r-1"}


def test_explicit_and_active_store_are_used() -> None:
    """An explicit store beats the active one, which beats the default one."""
    set_global_state("from", "default")
    explicit = ContextStore({"from": "explicit"})
    active = ContextStore({"from": "active"})

    assert _capture_here().data == {"from": "default"}
    with use_store(active):
        assert _capture_here().data == {"from": "active"}
        assert _capture_here(store=explicit).data == {"from": "explicit"}


def test_host_override_from_settings(monkeypatch: Any) -> None:
    """`IODINE_HOST` replaces the resolved host name."""
    monkeypatch.setenv("IODINE_HOST", "edge-7")
    load_settings.cache_clear()
    assert resolve_host() == "edge-7"
    assert _capture_here().host == "edge-7"


def test_host_resolution_failure_degrades(monkeypatch: Any) -> None:
    """An `OSError` from the OS lookup yields an empty host, never an exception."""
    monkeypatch.delenv("IODINE_HOST", raising=False)
    load_settings.cache_clear()

    def _broken() -> str:
        raise OSError("no hostname")

    monkeypatch.setattr(socket, "gethostname", _broken)
    assert resolve_host() == ""
    assert _capture_here().host == ""
    assert _capture_here(host_resolver=_broken).host == ""


def test_entry_is_immutable_and_isolated() -> None:
    """Entries are frozen and do not share the caller's mapping."""
    data = {"k": "v"}
    entry = _capture_here(data=data)
    data["k"] = "changed"
    assert entry.data == {"k": "v"}
    with pytest.raises(ValidationError):
        entry.line = 99  # type: ignore[misc]


def test_failing_resolver_and_unprintable_values_degrade() -> None:
    """Any resolver error gives an empty host; an unprintable value gets a placeholder."""

    def _resolver() -> str:
        raise RuntimeError("resolver crashed")

    class _Unprintable:
        def __str__(self) -> str:
            raise RuntimeError("no text form")

    entry = _capture_here(host_resolver=_resolver, data={"ok": "1", "bad": _Unprintable()})
    assert entry.host == ""
    assert entry.data == {"ok": "1", "bad": "<unprintable _Unprintable>"}
