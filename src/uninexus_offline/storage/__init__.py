# src/uninexus_offline/storage/__init__.py
"""Durable key-value store adapters."""

from __future__ import annotations

from uninexus_offline.core.settings import Settings

from .base import UNREADABLE, KeyValueStore, decode_json, encode_json
from .memory import MemoryKeyValueStore
from .redis_store import RedisKeyValueStore
from .sql import SqlKeyValueStore


def build_store(config: Settings) -> KeyValueStore:
    """Create the key-value store selected by ``storage_backend``."""
    backend = config.storage_backend.lower()
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "redis":
        return RedisKeyValueStore.from_url(config.redis_url)
    if backend == "sql":
        from uninexus_offline.db.session import (
            build_engine,
            build_session_factory,
            create_tables,
        )

        engine = build_engine(config.storage_url, echo=config.sql_debug)
        create_tables(engine)
        return SqlKeyValueStore(build_session_factory(engine), engine)
    raise ValueError(f"Unknown storage backend: {config.storage_backend!r}")


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "SqlKeyValueStore",
    "UNREADABLE",
    "build_store",
    "decode_json",
    "encode_json",
]
