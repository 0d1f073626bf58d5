"""SQLAlchemy-backed durable key-value store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uninexus_offline.core.errors import StorageError
from uninexus_offline.models import KeyValueEntry

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """Persist key-value pairs in the ``offline_kv_entry`` table.

    Each call opens a short-lived session from ``session_factory`` and runs it
    in a worker thread so the event loop is never blocked on database I/O.
    """

    def __init__(
        self, session_factory: Callable[[], Session], engine: Engine | None = None
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    async def get(self, key: str) -> str | None:
        return await self._run(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await self._run(self._set, key, value)

    async def remove(self, key: str) -> None:
        await self._run(self._remove_many, [key])

    async def keys(self, prefix: str = "") -> list[str]:
        return await self._run(self._keys, prefix)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        await self._run(self._remove_many, list(keys))

    async def close(self) -> None:
        if self._engine is not None:
            await asyncio.to_thread(self._engine.dispose)

    async def _run(self, func, *args):  # type: ignore[no-untyped-def]
        try:
            return await asyncio.to_thread(func, *args)
        except SQLAlchemyError as exc:
            logger.error("Key-value store operation %s failed: %s", func.__name__, exc)
            raise StorageError(f"Storage operation failed: {exc}") from exc

    def _get(self, key: str) -> str | None:
        with self._session_factory() as db:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None

    def _set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()

    def _keys(self, prefix: str) -> list[str]:
        with self._session_factory() as db:
            stmt = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
            if prefix:
                stmt = stmt.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
            return list(db.scalars(stmt))

    def _remove_many(self, keys: list[str]) -> None:
        if not keys:
            return
        with self._session_factory() as db:
            db.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
            db.commit()
