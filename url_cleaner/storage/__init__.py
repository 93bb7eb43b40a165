"""Storage backends for profiles, imports and URL records."""

from __future__ import annotations

from typing import Optional

from ..config import Settings
from .base import Clock, URLStore, system_clock
from .memory import InMemoryURLStore, matches_filters
from .sqlite import SQLiteURLStore


def create_store(settings: Settings, clock: Optional[Clock] = None) -> URLStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "sqlite":
        return SQLiteURLStore(settings.database_path, clock=clock)
    return InMemoryURLStore(clock=clock)


__all__ = [
    "Clock",
    "InMemoryURLStore",
    "SQLiteURLStore",
    "URLStore",
    "create_store",
    "matches_filters",
    "system_clock",
]
