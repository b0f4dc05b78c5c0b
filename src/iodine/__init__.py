"""iodine: wrap errors with a stack of call sites and diagnostic context.

Example
-------
>>> import iodine
>>> iodine.set_global_state("request", "r-17")
>>> err = iodine.new(ValueError("bad checksum"), {"object": "a.txt"})
>>> err = err.annotate({"stage": "upload"})
>>> len(err.stack)
2
>>> str(err)
'bad checksum'
"""

from __future__ import annotations

from .core import (
    AnnotatedError,
    CallSite,
    ContextStore,
    ErrorReport,
    StackEntry,
    clear_global_state,
    get_global_state,
    load_report,
    new,
    set_global_state,
    use_store,
    wrap,
)
from .errors import IodineError, ReportError, SerializationError

__all__ = [
    "__version__",
    "AnnotatedError",
    "CallSite",
    "ContextStore",
    "ErrorReport",
    "StackEntry",
    "new",
    "wrap",
    "use_store",
    "set_global_state",
    "clear_global_state",
    "get_global_state",
    "load_report",
    "IodineError",
    "SerializationError",
    "ReportError",
]
__version__ = "0.1.0"
