"""Core package for iodine: context stores, capture, annotated errors, rendering."""

from __future__ import annotations

from .annotated import AnnotatedError, new, wrap
from .capture import CallSite, capture_entry, resolve_call_site, resolve_host
from .context import (
    ContextStore,
    ReadWriteLock,
    active_store,
    clear_global_state,
    default_store,
    get_global_state,
    set_global_state,
    use_store,
)
from .entry import StackEntry
from .render import ErrorReport, load_report

__all__ = [
    "AnnotatedError",
    "new",
    "wrap",
    "CallSite",
    "capture_entry",
    "resolve_call_site",
    "resolve_host",
    "ContextStore",
    "ReadWriteLock",
    "active_store",
    "default_store",
    "use_store",
    "set_global_state",
    "clear_global_state",
    "get_global_state",
    "StackEntry",
    "ErrorReport",
    "load_report",
]
