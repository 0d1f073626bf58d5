"""Glue between connectivity changes and queue reconciliation.

This module provides:

- SyncCoordinator: tracks connectivity and backlog size, and drains the pending
  queue when the client comes back online or when a user asks to sync now.
- OfflineRuntime: builds every offline component from settings so callers get
  one explicitly constructed set of stores instead of module-level state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from uninexus_offline.core.settings import Settings, settings
from uninexus_offline.schemas.api import SyncStatus
from uninexus_offline.schemas.offline import SyncResult
from uninexus_offline.services.api_client import ApiClient
from uninexus_offline.services.cache_store import CacheStore
from uninexus_offline.services.draft_store import DraftStore
from uninexus_offline.services.network import (
    ConnectivityMonitor,
    NetworkStatusMonitor,
    Unsubscribe,
)
from uninexus_offline.services.offline_client import OfflineApiClient
from uninexus_offline.services.pending_queue import DeadLetterStore, PendingQueue
from uninexus_offline.services.reconciliation import ReconciliationDriver, SendFn
from uninexus_offline.storage import KeyValueStore, build_store
from uninexus_offline.utils.time import Clock, now_ms

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Drains the pending queue on reconnect and on demand."""

    def __init__(
        self,
        driver: ReconciliationDriver,
        monitor: NetworkStatusMonitor,
        send: SendFn,
        *,
        sync_on_reconnect: bool = True,
    ) -> None:
        self.driver = driver
        self.monitor = monitor
        self._send = send
        self._sync_on_reconnect = sync_on_reconnect
        self._unsubscribe: Unsubscribe | None = None
        self._sync_task: asyncio.Task[SyncResult] | None = None
        self.is_connected = True
        self.pending_actions_count = 0

    async def start(self) -> None:
        """Read the initial connectivity state and subscribe to transitions."""
        if self._unsubscribe is not None:
            return
        self.is_connected = await self.monitor.is_online()
        self._unsubscribe = self.monitor.subscribe(self._on_connectivity_change)
        await self.refresh_pending_count()

    async def stop(self) -> None:
        """Unsubscribe and wait for a sync started by a reconnect to finish."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        task, self._sync_task = self._sync_task, None
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    async def _on_connectivity_change(self, connected: bool) -> None:
        self.is_connected = connected
        if connected and self._sync_on_reconnect:
            if self._sync_task is None or self._sync_task.done():
                self._sync_task = asyncio.create_task(self._sync_after_reconnect())

    async def _sync_after_reconnect(self) -> SyncResult:
        try:
            return await self.sync_pending_actions()
        except Exception:
            logger.exception("Sync after reconnect failed")
            return SyncResult()

    async def refresh_pending_count(self) -> int:
        self.pending_actions_count = await self.driver.queue.count()
        return self.pending_actions_count

    async def sync_pending_actions(self) -> SyncResult:
        """Drain the queue now and refresh the pending count."""
        result = await self.driver.drain(self._send)
        await self.refresh_pending_count()
        return result

    async def status(self) -> SyncStatus:
        """Return a snapshot for an offline banner."""
        return SyncStatus(
            is_connected=self.is_connected,
            pending_actions_count=await self.refresh_pending_count(),
            dead_letter_count=await self.driver.dead_letters.count(),
            draining=self.driver.draining,
        )


@dataclass
class OfflineRuntime:
    """Every offline component, wired to one key-value store."""

    config: Settings
    store: KeyValueStore
    queue: PendingQueue
    dead_letters: DeadLetterStore
    cache: CacheStore
    drafts: DraftStore
    api: ApiClient
    monitor: ConnectivityMonitor
    driver: ReconciliationDriver
    coordinator: SyncCoordinator
    client: OfflineApiClient

    @classmethod
    def build(
        cls,
        config: Settings | None = None,
        *,
        store: KeyValueStore | None = None,
        api: ApiClient | None = None,
        monitor: ConnectivityMonitor | None = None,
        clock: Clock = now_ms,
    ) -> OfflineRuntime:
        config = config or settings
        store = store if store is not None else build_store(config)
        queue = PendingQueue(store, config.pending_queue_key, clock=clock)
        dead_letters = DeadLetterStore(store, config.failed_queue_key)
        cache = CacheStore(store, config.cache_prefix, clock=clock, config=config)
        drafts = DraftStore(store, config.draft_prefix, clock=clock)
        api = api or ApiClient(store, config)
        monitor = monitor or ConnectivityMonitor(config)
        driver = ReconciliationDriver(queue, dead_letters, max_retries=config.max_retries)
        coordinator = SyncCoordinator(
            driver, monitor, api.send, sync_on_reconnect=config.sync_on_reconnect
        )
        client = OfflineApiClient(api, queue, cache, monitor)
        return cls(
            config=config,
            store=store,
            queue=queue,
            dead_letters=dead_letters,
            cache=cache,
            drafts=drafts,
            api=api,
            monitor=monitor,
            driver=driver,
            coordinator=coordinator,
            client=client,
        )

    async def start(self) -> None:
        await self.coordinator.start()
        await self.monitor.start()

    async def stop(self) -> None:
        await self.monitor.stop()
        await self.coordinator.stop()
        await self.api.close()
        await self.store.close()
