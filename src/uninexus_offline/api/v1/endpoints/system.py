"""System endpoints for the local control API."""

from __future__ import annotations

import time

from fastapi import APIRouter

from uninexus_offline.api.v1.dependencies import RuntimeDep
from uninexus_offline.core.errors import StorageError

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config(runtime: RuntimeDep) -> dict[str, object]:
    """Return a sanitized snapshot of runtime configuration.

    Excludes connection strings and the stored token.

    Returns:
        Dictionary with app metadata, retry policy, cache lifetimes and
        connectivity settings
    """
    config = runtime.config
    return {
        "app": {
            "name": config.app_name,
            "version": config.app_version,
            "debug": config.debug,
        },
        "api": {
            "base_url": config.api_base_url,
            "timeout_seconds": config.http_timeout_seconds,
        },
        "queue": {
            "max_retries": config.max_retries,
            "storage_backend": config.storage_backend,
        },
        "cache": config.cache_durations,
        "connectivity": {
            "poll_interval_seconds": config.connectivity_poll_interval_seconds,
            "sync_on_reconnect": config.sync_on_reconnect,
        },
    }


@router.get("/health")
async def get_system_health(runtime: RuntimeDep) -> dict[str, object]:
    """Health check covering the durable store.

    Returns:
        Dictionary with overall status, storage status and connectivity state
    """
    try:
        await runtime.store.get(runtime.config.pending_queue_key)
        storage_status = "healthy"
    except StorageError as e:
        storage_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if storage_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "storage": storage_status,
            "connectivity": "online" if runtime.coordinator.is_connected else "offline",
        },
        "version": runtime.config.app_version,
    }
