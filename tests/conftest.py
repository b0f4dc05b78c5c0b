"""Shared fixtures: every test starts with an empty global store and fresh settings."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from iodine.core.context import clear_global_state
from iodine.core.settings import load_settings


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _isolate_state() -> Iterator[None]:
    """Reset process-wide state before and after each test."""
    clear_global_state()
    load_settings.cache_clear()
    yield
    clear_global_state()
    load_settings.cache_clear()
