"""Durable store implementations.

Both stores share one SQLite database file by default but are written
independently; there is no transaction spanning them.
"""

from src.providers.store.sqlite_resolution_store import SQLiteResolutionStore
from src.providers.store.sqlite_smart_link_store import SQLiteSmartLinkStore

__all__ = ["SQLiteResolutionStore", "SQLiteSmartLinkStore"]
