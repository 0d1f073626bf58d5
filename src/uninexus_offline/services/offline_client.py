"""Offline-aware reads and writes on top of :class:`ApiClient`."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from uninexus_offline.core.errors import ApiUnavailableError, OfflineDataUnavailableError
from uninexus_offline.schemas.offline import ActionType, PendingAction, PendingActionCreate
from uninexus_offline.services.api_client import ApiClient
from uninexus_offline.services.cache_store import CacheStore, serialize_query_key
from uninexus_offline.services.network import NetworkStatusMonitor
from uninexus_offline.services.pending_queue import PendingQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedWrite:
    """Returned by :meth:`OfflineApiClient.submit` when a write was deferred."""

    action: PendingAction


class OfflineApiClient:
    """Routes writes to the network or the pending queue and backs reads with the cache."""

    def __init__(
        self,
        api: ApiClient,
        queue: PendingQueue,
        cache: CacheStore,
        monitor: NetworkStatusMonitor,
    ) -> None:
        self.api = api
        self.queue = queue
        self.cache = cache
        self.monitor = monitor

    async def submit(
        self,
        action_type: ActionType,
        endpoint: str,
        *,
        method: str = "POST",
        payload: Any | None = None,
        defer: bool = False,
    ) -> Any:
        """Send a write now, or queue it when offline or when ``defer`` is set.

        A write that fails at the transport level is queued as well. API errors
        propagate: the server answered and replaying would not help.
        """
        body = json.dumps(payload) if payload is not None else "{}"
        if not defer and await self.monitor.is_online():
            try:
                return await self.api.send(endpoint, method=method, body=body)
            except ApiUnavailableError as exc:
                logger.info("Send to %s failed (%s); queueing for later", endpoint, exc)

        action = await self.queue.enqueue(
            PendingActionCreate(type=action_type, endpoint=endpoint, method=method, body=body)
        )
        return QueuedWrite(action)

    async def fetch(self, endpoint: str) -> Any:
        """Read ``endpoint`` from the network, falling back to the cache offline.

        Successful network reads refresh the cache with the resource-class lifetime.
        """
        if await self.monitor.is_online():
            try:
                data = await self.api.send(endpoint, method="GET")
            except ApiUnavailableError as exc:
                logger.info("Read of %s failed (%s); using cache", endpoint, exc)
            else:
                await self.cache.cache_query_result([endpoint], data)
                return data

        cached = await self.cache.get(serialize_query_key([endpoint]))
        if cached is None:
            raise OfflineDataUnavailableError(f"No cached data for {endpoint}")
        return cached
