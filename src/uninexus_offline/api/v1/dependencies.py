"""Common dependencies for version 1 endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from uninexus_offline.services.sync import OfflineRuntime


def get_runtime(request: Request) -> OfflineRuntime:
    """Return the offline runtime attached to the application at startup."""
    runtime: OfflineRuntime | None = getattr(request.app.state, "offline_runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Offline runtime is not initialized",
        )
    return runtime


RuntimeDep = Annotated[OfflineRuntime, Depends(get_runtime)]
