# tests/conftest.py
from __future__ import annotations

import json
import os
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("UNINEXUS_STORAGE_BACKEND", "memory")
os.environ.setdefault("UNINEXUS_API_URL", "http://api.test")

from uninexus_offline.core.settings import Settings
from uninexus_offline.db.session import build_session_factory, create_tables, drop_tables
from uninexus_offline.main import app as fastapi_app
from uninexus_offline.services.api_client import ApiClient
from uninexus_offline.services.cache_store import CacheStore
from uninexus_offline.services.draft_store import DraftStore
from uninexus_offline.services.network import ConnectivityMonitor
from uninexus_offline.services.pending_queue import DeadLetterStore, PendingQueue
from uninexus_offline.services.reconciliation import ReconciliationDriver
from uninexus_offline.services.sync import OfflineRuntime
from uninexus_offline.storage import MemoryKeyValueStore, SqlKeyValueStore

TEST_DB_URL = "sqlite://"
START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeSender:
    """Send function that fails or succeeds according to a script.

    ``outcomes`` is consumed per call; ``True`` succeeds, an exception instance
    is raised. Once exhausted, ``default`` applies.
    """

    def __init__(self, outcomes: list[Any] | None = None, default: Any = True) -> None:
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls: list[tuple[str, str, str | None]] = []

    async def __call__(self, endpoint: str, *, method: str, body: str | None) -> Any:
        self.calls.append((endpoint, method, body))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        return {"ok": True}


class StaticMonitor(ConnectivityMonitor):
    """Connectivity monitor whose checks return a settable flag."""

    def __init__(self, config: Settings | None = None, online: bool = True) -> None:
        super().__init__(config)
        self.online = online

    async def check_link(self) -> bool:
        return self.online

    async def check_reachability(self) -> bool:
        return self.online


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "storage_backend": "memory",
        "api_base_url": "http://api.test",
        "connectivity_poll_interval_seconds": 60.0,
        "sync_on_reconnect": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def queue(kv_store: MemoryKeyValueStore, test_settings: Settings, clock: FakeClock) -> PendingQueue:
    return PendingQueue(kv_store, test_settings.pending_queue_key, clock=clock)


@pytest.fixture()
def dead_letters(kv_store: MemoryKeyValueStore, test_settings: Settings) -> DeadLetterStore:
    return DeadLetterStore(kv_store, test_settings.failed_queue_key)


@pytest.fixture()
def driver(queue: PendingQueue, dead_letters: DeadLetterStore) -> ReconciliationDriver:
    return ReconciliationDriver(queue, dead_letters, max_retries=3)


@pytest.fixture()
def cache_store(
    kv_store: MemoryKeyValueStore, test_settings: Settings, clock: FakeClock
) -> CacheStore:
    return CacheStore(kv_store, test_settings.cache_prefix, clock=clock, config=test_settings)


@pytest.fixture()
def draft_store(
    kv_store: MemoryKeyValueStore, test_settings: Settings, clock: FakeClock
) -> DraftStore:
    return DraftStore(kv_store, test_settings.draft_prefix, clock=clock)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def sql_store(engine: Engine) -> SqlKeyValueStore:
    return SqlKeyValueStore(build_session_factory(engine))


class RecordingApi:
    """``httpx.MockTransport`` handler for the remote UniNexus API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "Server rejected request"})
        if request.method == "GET":
            return httpx.Response(200, json={"path": request.url.path, "items": [1, 2, 3]})
        payload = json.loads(request.content) if request.content else None
        return httpx.Response(201, json={"received": payload})


@pytest.fixture()
def remote_api() -> RecordingApi:
    return RecordingApi()


@pytest.fixture()
def runtime(
    test_settings: Settings,
    kv_store: MemoryKeyValueStore,
    clock: FakeClock,
    remote_api: RecordingApi,
) -> OfflineRuntime:
    api = ApiClient(kv_store, test_settings, transport=httpx.MockTransport(remote_api))
    monitor = StaticMonitor(test_settings, online=True)
    return OfflineRuntime.build(
        test_settings, store=kv_store, api=api, monitor=monitor, clock=clock
    )


@pytest.fixture()
def app(runtime: OfflineRuntime) -> Iterator[FastAPI]:
    fastapi_app.state.offline_runtime = runtime
    try:
        yield fastapi_app
    finally:
        del fastapi_app.state.offline_runtime


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
