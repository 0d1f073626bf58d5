"""Pydantic schemas for offline queue, cache and draft records.

Records are persisted as JSON with camelCase keys so that stores written by
the mobile client stay readable. Python code uses the snake_case attributes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ActionType = Literal["post", "comment", "message", "reaction"]
DraftType = Literal["post", "comment", "message"]


class StoredRecord(BaseModel):
    """Base for records persisted in the key-value store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> dict[str, Any]:
        """Return the camelCase mapping written to storage."""
        return self.model_dump(by_alias=True, mode="json")


class PendingActionCreate(BaseModel):
    """Caller-supplied part of a pending action."""

    type: ActionType
    endpoint: str = Field(..., min_length=1, description="Target resource path")
    method: str = Field(..., min_length=1, description="HTTP verb to replay")
    body: str = Field(..., description="JSON payload serialized at enqueue time")


class PendingAction(StoredRecord):
    """A durable record of one not-yet-confirmed mutation."""

    id: str
    type: ActionType
    endpoint: str
    method: str
    body: str
    created_at: int
    retries: int = Field(default=0, ge=0)


class CachedEntry(StoredRecord):
    """A time-boxed snapshot of a successful read."""

    data: Any
    timestamp: int
    expires_at: int

    def is_expired(self, now: int) -> bool:
        """Return True once ``now`` has reached the expiry instant."""
        return now >= self.expires_at


class Draft(StoredRecord):
    """An unsent user composition."""

    content: str
    metadata: dict[str, Any] | None = None
    saved_at: int


class SyncResult(BaseModel):
    """Outcome of one drain of the pending queue."""

    success: int = 0
    failed: int = 0
    skipped: bool = False
