# src/uninexus_offline/main.py
"""Main entry point for the local offline sync control API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uninexus_offline.api.v1 import cache_router, drafts_router, sync_router, system_router
from uninexus_offline.core.logging import configure_logging
from uninexus_offline.core.settings import settings
from uninexus_offline.services.sync import OfflineRuntime

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="UniNexus Offline Sync API",
    description="Local control surface for the UniNexus offline write queue",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=["*"],
)

# Include API routers
app.include_router(sync_router, prefix="/api/v1")
app.include_router(drafts_router, prefix="/api/v1")
app.include_router(cache_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    runtime: OfflineRuntime | None = getattr(app.state, "offline_runtime", None)
    if runtime is None:
        runtime = OfflineRuntime.build(settings)
        app.state.offline_runtime = runtime
    await runtime.start()
    logger.info("Offline runtime started with %s storage", runtime.config.storage_backend)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    runtime: OfflineRuntime | None = getattr(app.state, "offline_runtime", None)
    if runtime:
        await runtime.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "UniNexus Offline Sync API",
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("uninexus_offline.main:app", host="127.0.0.1", port=8100, reload=settings.debug)
