# src/uninexus_offline/schemas/__init__.py
"""Pydantic schemas for the offline sync subsystem."""

from .api import CacheClearResult, DraftUpdate, PendingActionRequest, SyncStatus
from .offline import (
    ActionType,
    CachedEntry,
    Draft,
    DraftType,
    PendingAction,
    PendingActionCreate,
    SyncResult,
)

__all__ = [
    "ActionType", "DraftType",
    "PendingAction", "PendingActionCreate",
    "CachedEntry",
    "Draft",
    "SyncResult",
    "PendingActionRequest", "SyncStatus", "DraftUpdate", "CacheClearResult",
]
