"""Redis-backed durable key-value store."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from uninexus_offline.core.errors import StorageError

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _glob_escape(prefix: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class RedisKeyValueStore:
    """Persist key-value pairs as plain Redis strings."""

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisKeyValueStore:
        return cls(redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            raise StorageError(f"Redis get failed: {exc}") from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(key, value)
        except RedisError as exc:
            raise StorageError(f"Redis set failed: {exc}") from exc

    async def remove(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as exc:
            raise StorageError(f"Redis delete failed: {exc}") from exc

    async def keys(self, prefix: str = "") -> list[str]:
        found: list[str] = []
        try:
            async for key in self._redis.scan_iter(match=f"{_glob_escape(prefix)}*"):
                found.append(key.decode("utf-8") if isinstance(key, bytes) else key)
        except RedisError as exc:
            raise StorageError(f"Redis scan failed: {exc}") from exc
        return sorted(found)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            await self._redis.delete(*keys)
        except RedisError as exc:
            raise StorageError(f"Redis delete failed: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except RedisError as exc:  # pragma: no cover - shutdown path
            logger.warning("Failed to close Redis connection: %s", exc)
