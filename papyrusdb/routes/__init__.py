"""API routes."""

from .categories import router as categories_router
from .entries import router as entries_router
from .status import router as status_router
from .sync import router as sync_router

__all__ = [
    "categories_router",
    "entries_router",
    "status_router",
    "sync_router",
]
