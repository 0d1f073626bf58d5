"""Replays queued writes against the network once connectivity returns."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from uninexus_offline.core.errors import StorageError
from uninexus_offline.schemas.offline import SyncResult
from uninexus_offline.services.pending_queue import DeadLetterStore, PendingQueue

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


class SendFn(Protocol):
    """Performs one network call; raising means the attempt failed."""

    async def __call__(self, endpoint: str, *, method: str, body: str | None) -> Any: ...


class ReconciliationDriver:
    """Drains the pending queue through an injected send function.

    Each drain works on a snapshot of the queue taken when it starts and
    attempts every action in that snapshot exactly once, in FIFO order. A
    failing action does not stop the ones behind it. Only storage failures
    escape :meth:`drain`.
    """

    def __init__(
        self,
        queue: PendingQueue,
        dead_letters: DeadLetterStore,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.queue = queue
        self.dead_letters = dead_letters
        self.max_retries = max_retries
        self._draining = False

    @property
    def draining(self) -> bool:
        return self._draining

    async def drain(self, send: SendFn) -> SyncResult:
        """Replay every queued action once and report this drain's outcome.

        A call made while another drain is running returns immediately with
        ``skipped=True`` and touches nothing.
        """
        if self._draining:
            logger.info("Drain requested while another drain is running; skipping")
            return SyncResult(skipped=True)

        self._draining = True
        try:
            return await self._drain(send)
        finally:
            self._draining = False

    async def _drain(self, send: SendFn) -> SyncResult:
        snapshot = await self.queue.list()
        result = SyncResult()
        if not snapshot:
            return result

        logger.info("Draining %d pending action(s)", len(snapshot))
        for action in snapshot:
            try:
                await send(action.endpoint, method=action.method, body=action.body)
            except StorageError:
                raise
            except Exception as exc:
                action.retries += 1
                logger.warning(
                    "Replay of action %s (%s %s) failed on attempt %d/%d: %s",
                    action.id,
                    action.method,
                    action.endpoint,
                    action.retries,
                    self.max_retries,
                    exc,
                )
                if action.retries >= self.max_retries:
                    # Dead-letter before removal; append ignores ids it already holds.
                    await self.dead_letters.append(action)
                    await self.queue.remove(action.id)
                    result.failed += 1
                    logger.warning("Action %s moved to the dead-letter store", action.id)
                else:
                    await self.queue.update(action)
                continue

            await self.queue.remove(action.id)
            result.success += 1

        logger.info("Drain finished: %d succeeded, %d failed", result.success, result.failed)
        return result
