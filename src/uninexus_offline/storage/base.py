"""Durable key-value store interface shared by the offline stores."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Durable put/get/remove of string values by string key.

    Implementations raise :class:`~uninexus_offline.core.errors.StorageError`
    when the backend itself fails.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def keys(self, prefix: str = "") -> list[str]: ...

    async def multi_remove(self, keys: Iterable[str]) -> None: ...

    async def close(self) -> None: ...


class Unreadable:
    """Sentinel for a stored value that exists but cannot be decoded."""

    def __repr__(self) -> str:
        return "UNREADABLE"


UNREADABLE = Unreadable()


def decode_json(key: str, raw: str | None) -> Any:
    """Decode a stored value.

    Returns ``None`` when nothing is stored and :data:`UNREADABLE` when the
    stored text is not valid JSON.
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Storage entry %s is unreadable; treating it as absent", key)
        return UNREADABLE


def encode_json(value: Any) -> str:
    """Serialize a value for storage."""
    return json.dumps(value, separators=(",", ":"))
