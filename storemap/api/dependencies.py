"""
FastAPI dependencies — DataStore singleton.
"""
from __future__ import annotations

from fastapi import HTTPException

from storemap.data.store import DataStore

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None


def set_store(store: DataStore) -> None:
    global _store
    _store = store


def get_store() -> DataStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


def get_store_or_empty() -> DataStore:
    """Return the store even if nothing has been loaded (health/reload)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store
