"""Draft endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from uninexus_offline.api.v1.dependencies import RuntimeDep
from uninexus_offline.schemas import Draft, DraftType, DraftUpdate

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.get("/{draft_type}", response_model=Draft, response_model_by_alias=False)
async def get_draft(draft_type: DraftType, runtime: RuntimeDep) -> Draft:
    draft = await runtime.drafts.get_draft(draft_type)
    if draft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No draft saved")
    return draft


@router.put("/{draft_type}", response_model=Draft, response_model_by_alias=False)
async def save_draft(draft_type: DraftType, update: DraftUpdate, runtime: RuntimeDep) -> Draft:
    """Overwrite the draft for this content type."""
    return await runtime.drafts.save_draft(draft_type, update.content, update.metadata)


@router.delete("/{draft_type}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_draft(draft_type: DraftType, runtime: RuntimeDep) -> None:
    await runtime.drafts.clear_draft(draft_type)
