"""In-process key-value store for tests and ephemeral sessions."""

from __future__ import annotations

from collections.abc import Iterable


class MemoryKeyValueStore:
    """Dictionary-backed store. Contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in list(keys):
            self._data.pop(key, None)

    async def close(self) -> None:
        return None

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the raw stored values."""
        return dict(self._data)
