# src/uninexus_offline/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .cache import router as cache_router
from .drafts import router as drafts_router
from .sync import router as sync_router
from .system import router as system_router

__all__ = [
    "sync_router",
    "drafts_router",
    "cache_router",
    "system_router",
]
