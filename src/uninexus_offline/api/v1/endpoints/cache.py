"""Response cache endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from uninexus_offline.api.v1.dependencies import RuntimeDep
from uninexus_offline.schemas import CacheClearResult

router = APIRouter(prefix="/cache", tags=["cache"])


@router.delete("", response_model=CacheClearResult)
async def clear_cache(runtime: RuntimeDep, pattern: str | None = None) -> CacheClearResult:
    """Remove cached responses, optionally only keys containing ``pattern``."""
    removed = await runtime.cache.clear(pattern)
    return CacheClearResult(removed=removed)
