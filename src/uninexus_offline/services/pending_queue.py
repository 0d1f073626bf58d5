"""Durable FIFO of writes waiting to reach the UniNexus API.

The queue and the dead-letter store each keep their whole list under a single
storage key. Every mutation re-reads the stored list under a lock immediately
before writing it back, so an enqueue that lands while a drain is suspended on
the network is never overwritten.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
from typing import Any

from pydantic import ValidationError

from uninexus_offline.schemas.offline import PendingAction, PendingActionCreate
from uninexus_offline.storage.base import UNREADABLE, KeyValueStore, decode_json, encode_json
from uninexus_offline.utils.time import Clock, now_ms

logger = logging.getLogger(__name__)

ID_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 9


def generate_action_id(created_at: int) -> str:
    """Return a time-prefixed id with a random base36 suffix."""
    suffix = "".join(secrets.choice(ID_SUFFIX_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{created_at}-{suffix}"


class ActionListStore:
    """A list of :class:`PendingAction` persisted under one storage key."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._key = key
        self._lock = asyncio.Lock()

    @property
    def key(self) -> str:
        return self._key

    async def list(self) -> list[PendingAction]:
        """Return stored actions, oldest first.

        An unreadable list (invalid JSON or not a list) is treated as empty.
        Records that fail validation are skipped; the rest are kept.
        """
        return self._parse(await self._store.get(self._key))

    async def count(self) -> int:
        return len(await self.list())

    async def clear(self) -> None:
        async with self._lock:
            await self._store.remove(self._key)

    async def _write(self, actions: list[PendingAction]) -> None:
        await self._store.set(self._key, encode_json([a.to_storage() for a in actions]))

    def _parse(self, raw: str | None) -> list[PendingAction]:
        decoded: Any = decode_json(self._key, raw)
        if decoded is None or decoded is UNREADABLE:
            return []
        if not isinstance(decoded, list):
            logger.warning("Storage entry %s is not a list; treating it as empty", self._key)
            return []
        actions: list[PendingAction] = []
        for index, item in enumerate(decoded):
            try:
                actions.append(PendingAction.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid record %d in storage entry %s: %s",
                    index,
                    self._key,
                    exc,
                )
        return actions


class PendingQueue(ActionListStore):
    """Ordered buffer of mutations that must eventually reach the server."""

    def __init__(self, store: KeyValueStore, key: str, clock: Clock = now_ms) -> None:
        super().__init__(store, key)
        self._clock = clock

    async def enqueue(self, action: PendingActionCreate) -> PendingAction:
        """Append a new action and persist the queue.

        Storage failures propagate so the caller can warn that the write may be lost.
        """
        created_at = self._clock()
        pending = PendingAction(
            id=generate_action_id(created_at),
            type=action.type,
            endpoint=action.endpoint,
            method=action.method,
            body=action.body,
            created_at=created_at,
            retries=0,
        )
        async with self._lock:
            queue = await self.list()
            existing = {item.id for item in queue}
            while pending.id in existing:
                pending.id = generate_action_id(created_at)
            queue.append(pending)
            await self._write(queue)

        logger.info(
            "Queued %s action %s for %s %s",
            pending.type,
            pending.id,
            pending.method,
            pending.endpoint,
        )
        return pending

    async def remove(self, action_id: str) -> None:
        """Delete the action with ``action_id``; absent ids are ignored."""
        async with self._lock:
            queue = await self.list()
            remaining = [item for item in queue if item.id != action_id]
            if len(remaining) != len(queue):
                await self._write(remaining)

    async def update(self, action: PendingAction) -> bool:
        """Replace the stored action sharing ``action.id``.

        Returns False, without writing, when the action is no longer queued.
        """
        async with self._lock:
            queue = await self.list()
            for index, item in enumerate(queue):
                if item.id == action.id:
                    queue[index] = action
                    await self._write(queue)
                    return True
            return False


class DeadLetterStore(ActionListStore):
    """Holding area for actions that exhausted their retries.

    Entries are kept for inspection and manual clearing only; nothing replays them.
    """

    async def append(self, action: PendingAction) -> None:
        """Store ``action`` verbatim. An id already present is not duplicated."""
        async with self._lock:
            failed = await self.list()
            if any(item.id == action.id for item in failed):
                return
            failed.append(action)
            await self._write(failed)
