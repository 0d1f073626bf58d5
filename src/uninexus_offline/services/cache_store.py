"""Time-boxed cache of successful API reads."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from uninexus_offline.core.settings import Settings, settings
from uninexus_offline.schemas.offline import CachedEntry
from uninexus_offline.storage.base import UNREADABLE, KeyValueStore, decode_json, encode_json
from uninexus_offline.utils.time import Clock, now_ms

logger = logging.getLogger(__name__)

FEED_RESOURCE_MARKERS = ("/api/posts",)
MESSAGE_RESOURCE_MARKERS = ("/api/conversations", "/api/messages")


def get_cache_duration(resource: str, config: Settings | None = None) -> int:
    """Return the cache lifetime in milliseconds for a resource identifier."""
    config = config or settings
    if any(marker in resource for marker in FEED_RESOURCE_MARKERS):
        return config.feed_cache_ttl_ms
    if any(marker in resource for marker in MESSAGE_RESOURCE_MARKERS):
        return config.messages_cache_ttl_ms
    return config.default_cache_ttl_ms


def serialize_query_key(query_key: Sequence[Any]) -> str:
    """Render a query key as a stable cache key.

    Keys that are not JSON-serializable fall back to joining each part.
    """
    try:
        return json.dumps(list(query_key), separators=(",", ":"))
    except (TypeError, ValueError):
        parts = []
        for part in query_key:
            if isinstance(part, dict | list):
                try:
                    parts.append(json.dumps(part, separators=(",", ":")))
                    continue
                except (TypeError, ValueError):
                    pass
            parts.append(str(part))
        return "_".join(parts)


class CacheStore:
    """Stores cached reads under a key prefix with an absolute expiry."""

    def __init__(
        self,
        store: KeyValueStore,
        prefix: str,
        *,
        clock: Clock = now_ms,
        config: Settings | None = None,
    ) -> None:
        self._store = store
        self._prefix = prefix
        self._clock = clock
        self._config = config or settings

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def put(self, key: str, data: Any, ttl_ms: int | None = None) -> CachedEntry:
        """Cache ``data`` for ``ttl_ms`` (or the resource-class default)."""
        if ttl_ms is None:
            ttl_ms = get_cache_duration(key, self._config)
        now = self._clock()
        entry = CachedEntry(data=data, timestamp=now, expires_at=now + ttl_ms)
        await self._store.set(self._key(key), encode_json(entry.to_storage()))
        return entry

    async def get(self, key: str) -> Any | None:
        """Return cached data, or None when absent, expired or unreadable.

        Expired and unreadable entries are removed from storage.
        """
        storage_key = self._key(key)
        decoded = decode_json(storage_key, await self._store.get(storage_key))
        if decoded is None:
            return None
        if decoded is UNREADABLE:
            await self._store.remove(storage_key)
            return None

        try:
            entry = CachedEntry.model_validate(decoded)
        except ValidationError:
            logger.warning("Cache entry %s is malformed; discarding it", storage_key)
            await self._store.remove(storage_key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache entry %s expired", storage_key)
            await self._store.remove(storage_key)
            return None
        return entry.data

    async def clear(self, pattern: str | None = None) -> int:
        """Remove cached entries, optionally only keys containing ``pattern``.

        Returns the number of entries removed.
        """
        keys = await self._store.keys(self._prefix)
        if pattern:
            keys = [key for key in keys if pattern in key]
        await self._store.multi_remove(keys)
        return len(keys)

    async def cache_query_result(self, query_key: Sequence[Any], data: Any) -> bool:
        """Cache a successful query result keyed by its serialized query key.

        The lifetime is chosen from the first element of the key. Failures are
        logged and reported as False; caching is best effort.
        """
        if not query_key or not isinstance(query_key[0], str):
            return False
        key = serialize_query_key(query_key)
        try:
            await self.put(key, data, get_cache_duration(query_key[0], self._config))
        except Exception as exc:
            logger.warning("Failed to cache query data for %s: %s", key, exc)
            return False
        return True
