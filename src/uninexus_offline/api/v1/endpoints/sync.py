"""Pending queue, sync and dead-letter endpoints."""

from __future__ import annotations

import json

from fastapi import APIRouter, HTTPException, status

from uninexus_offline.api.v1.dependencies import RuntimeDep
from uninexus_offline.core.errors import StorageError
from uninexus_offline.schemas import (
    PendingAction,
    PendingActionCreate,
    PendingActionRequest,
    SyncResult,
    SyncStatus,
)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status", response_model=SyncStatus)
async def get_sync_status(runtime: RuntimeDep) -> SyncStatus:
    """Return connectivity state and backlog counts for an offline banner."""
    return await runtime.coordinator.status()


@router.post("", response_model=SyncResult)
async def sync_now(runtime: RuntimeDep) -> SyncResult:
    """Drain the pending queue immediately ("Sync Now").

    Returns:
        Counts of actions delivered and dead-lettered by this drain; ``skipped``
        is true if another drain was already running.
    """
    try:
        return await runtime.coordinator.sync_pending_actions()
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc


@router.get("/pending", response_model=list[PendingAction], response_model_by_alias=False)
async def list_pending_actions(runtime: RuntimeDep) -> list[PendingAction]:
    return await runtime.queue.list()


@router.post(
    "/pending",
    response_model=PendingAction,
    response_model_by_alias=False,
    status_code=status.HTTP_201_CREATED,
)
async def enqueue_action(request: PendingActionRequest, runtime: RuntimeDep) -> PendingAction:
    """Queue a write for later delivery.

    Raises:
        HTTPException: 503 if the action could not be persisted and may be lost.
    """
    body = json.dumps(request.payload) if request.payload is not None else "{}"
    try:
        action = await runtime.queue.enqueue(
            PendingActionCreate(
                type=request.type,
                endpoint=request.endpoint,
                method=request.method.upper(),
                body=body,
            )
        )
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Action could not be saved and may be lost",
        ) from exc
    await runtime.coordinator.refresh_pending_count()
    return action


@router.get("/dead-letter", response_model=list[PendingAction], response_model_by_alias=False)
async def list_dead_letters(runtime: RuntimeDep) -> list[PendingAction]:
    """Return actions that exhausted their retries."""
    return await runtime.dead_letters.list()


@router.delete("/dead-letter", status_code=status.HTTP_204_NO_CONTENT)
async def clear_dead_letters(runtime: RuntimeDep) -> None:
    await runtime.dead_letters.clear()
