"""Request and response schemas for the local control API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .offline import ActionType


class PendingActionRequest(BaseModel):
    """Schema for enqueueing a write from the control API."""

    type: ActionType
    endpoint: str = Field(..., min_length=1, description="Target resource path")
    method: str = Field("POST", min_length=1, description="HTTP verb to replay")
    payload: dict[str, Any] | list[Any] | None = Field(
        None, description="JSON body; serialized when the action is enqueued"
    )


class SyncStatus(BaseModel):
    """Connectivity and backlog snapshot shown by an offline banner."""

    is_connected: bool
    pending_actions_count: int
    dead_letter_count: int
    draining: bool


class DraftUpdate(BaseModel):
    """Schema for saving a draft."""

    content: str
    metadata: dict[str, Any] | None = None


class CacheClearResult(BaseModel):
    """Number of cache entries removed."""

    removed: int
