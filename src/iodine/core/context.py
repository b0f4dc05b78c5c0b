"""
Ambient diagnostic context consulted whenever a stack entry is captured.

A :class:`ContextStore` is a string-to-string map that callers fill in as they
move through a call chain ("request_id", "bucket", "object", ...). Every
capture takes a snapshot, so later changes never leak into entries that were
already recorded.

Stores
------
- A process-wide default store backs the ``*_global_state`` functions.
- Callers that prefer explicit data flow create their own :class:`ContextStore`
  and either pass it to ``new``/``annotate`` or activate it for a block with
  :func:`use_store`.

Locking
-------
Each store owns a :class:`ReadWriteLock`: snapshots may run concurrently, while
``set``/``clear``/``update``/``remove`` are exclusive. Waiting writers block new
readers so a busy reader side cannot starve them.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar


class ReadWriteLock:
    """Shared/exclusive lock with writer preference."""

    __slots__ = ("_cond", "_readers", "_writer", "_waiting_writers")

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock in exclusive mode for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class ContextStore:
    """
    Thread-safe key/value map of diagnostic breadcrumbs.

    Attributes
    ----------
    _values : dict[str, str]
        Current context. Never handed out by reference.
    _lock : ReadWriteLock
        Guards ``_values``.
    """

    __slots__ = ("_values", "_lock")

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial) if initial else {}
        self._lock = ReadWriteLock()

    # ------------------------------- Writes ---------------------------------

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite ``key``."""
        with self._lock.write_locked():
            self._values[key] = value

    def update(self, values: Mapping[str, str]) -> None:
        """Set several keys under a single write lock."""
        with self._lock.write_locked():
            self._values.update(values)

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        with self._lock.write_locked():
            self._values.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock.write_locked():
            self._values.clear()

    # ------------------------------- Reads ----------------------------------

    def snapshot(self) -> dict[str, str]:
        """
        Return an independent copy of the current context.

        The caller owns the returned dict; mutating it does not touch the store.
        """
        with self._lock.read_locked():
            return dict(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock.read_locked():
            return key in self._values

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._values)

    # ------------------------------- Scoping --------------------------------

    @contextmanager
    def scoped(self, **values: str) -> Iterator[ContextStore]:
        """
        Set ``values`` for the duration of a ``with`` block.

        On exit each key goes back to the value it had before the block, or is
        removed if it was absent. Keys written by other code inside the block
        are left alone.

        Example
        -------
        >>> store = ContextStore()
        >>> with store.scoped(bucket="photos"):
        ...     "bucket" in store
        True
        >>> "bucket" in store
        False
        """
        missing = object()
        with self._lock.write_locked():
            previous = {k: self._values.get(k, missing) for k in values}
            self._values.update(values)
        try:
            yield self
        finally:
            with self._lock.write_locked():
                for key, old in previous.items():
                    if old is missing:
                        self._values.pop(key, None)
                    else:
                        self._values[key] = old  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ContextStore({self.snapshot()!r})"


# ----- Process-wide default store and the active-store provider ---------------

_default_store = ContextStore()
_active_store: ContextVar[ContextStore | None] = ContextVar("iodine_store", default=None)


def default_store() -> ContextStore:
    """Return the process-wide store behind the ``*_global_state`` functions."""
    return _default_store


def active_store() -> ContextStore:
    """Return the store activated by :func:`use_store`, else the default store."""
    store = _active_store.get()
    # Compare with None: an empty store is falsy through __len__.
    return _default_store if store is None else store


@contextmanager
def use_store(store: ContextStore) -> Iterator[ContextStore]:
    """Make ``store`` the one captures consult within the current context."""
    token = _active_store.set(store)
    try:
        yield store
    finally:
        _active_store.reset(token)


def set_global_state(key: str, value: str) -> None:
    """Insert or overwrite ``key`` in the process-wide store."""
    _default_store.set(key, value)


def clear_global_state() -> None:
    """Remove every entry from the process-wide store."""
    _default_store.clear()


def get_global_state() -> dict[str, str]:
    """Return a fresh copy of the process-wide store."""
    return _default_store.snapshot()


__all__ = [
    "ReadWriteLock",
    "ContextStore",
    "default_store",
    "active_store",
    "use_store",
    "set_global_state",
    "clear_global_state",
    "get_global_state",
]
