"""Store and engine wiring for FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends

from .config import Settings, get_settings
from .reconcile import SyncEngine
from .store import JsonFileStore, open_store

_store: JsonFileStore | None = None


def get_store(settings: Settings | None = None) -> JsonFileStore:
    """Get the process-wide store, opening it on first use."""
    global _store
    if _store is None:
        if settings is None:
            settings = get_settings()
        _store = open_store(settings)
    return _store


def reset_store() -> None:
    """Forget the cached store (next call reopens it)."""
    global _store
    _store = None


def get_engine(settings: Annotated[Settings, Depends(get_settings)]) -> SyncEngine:
    """FastAPI dependency for the reconciliation engine."""
    return SyncEngine(get_store(settings))


# Type alias for dependency injection
Engine = Annotated[SyncEngine, Depends(get_engine)]
