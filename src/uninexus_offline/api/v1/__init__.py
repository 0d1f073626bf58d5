# src/uninexus_offline/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import cache_router, drafts_router, sync_router, system_router

__all__ = [
    "sync_router",
    "drafts_router",
    "cache_router",
    "system_router",
]
