"""Connectivity monitoring.

The monitor reports "online" only when a transport-level connection to the API
host succeeds *and* the reachability URL answers over HTTP. Subscribers are
called with the new state on every transition.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx

from uninexus_offline.core.settings import Settings, settings

logger = logging.getLogger(__name__)

HTTP_INTERNAL_SERVER_ERROR = 500
DEFAULT_PORTS = {"http": 80, "https": 443}

ConnectivityCallback = Callable[[bool], Awaitable[None] | None]
Unsubscribe = Callable[[], None]


class NetworkStatusMonitor(Protocol):
    """The two capabilities the sync subsystem needs from a connectivity source."""

    async def is_online(self) -> bool: ...

    def subscribe(self, callback: ConnectivityCallback) -> Unsubscribe: ...


class ConnectivityMonitor:
    """Polls link and reachability checks and publishes transitions."""

    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or settings
        self._transport = transport
        self._subscribers: list[ConnectivityCallback] = []
        self._connected: bool | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def connected(self) -> bool | None:
        """Last known state, or None before the first check."""
        return self._connected

    async def check_link(self) -> bool:
        """Return True if a TCP connection to the API host can be opened."""
        url = httpx.URL(self.config.api_base_url)
        host = url.host
        port = url.port or DEFAULT_PORTS.get(url.scheme, 80)
        if not host:
            return False
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.config.connectivity_probe_timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            logger.debug("Link check to %s:%s failed: %s", host, port, exc)
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    async def check_reachability(self) -> bool:
        """Return True if the reachability URL answers below HTTP 500."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.connectivity_probe_timeout_seconds),
                transport=self._transport,
            ) as client:
                response = await client.get(self.config.effective_reachability_url)
        except httpx.HTTPError as exc:
            logger.debug("Reachability probe failed: %s", exc)
            return False
        return response.status_code < HTTP_INTERNAL_SERVER_ERROR

    async def is_online(self) -> bool:
        """Point-in-time check; both link and reachability must hold."""
        if not await self.check_link():
            return False
        return await self.check_reachability()

    def subscribe(self, callback: ConnectivityCallback) -> Unsubscribe:
        """Register ``callback`` for transitions and return its unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def report(self, connected: bool) -> bool:
        """Record a connectivity observation.

        Subscribers are notified only when the state differs from the last one
        recorded. Returns True if a transition was published.
        """
        connected = bool(connected)
        if connected == self._connected:
            return False
        previous = self._connected
        self._connected = connected
        logger.info("Connectivity changed: %s -> %s", previous, connected)
        for callback in list(self._subscribers):
            try:
                outcome = callback(connected)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Connectivity subscriber %r failed", callback)
        return True

    async def poll_once(self) -> bool:
        """Run one check, publish any transition and return the observed state."""
        online = await self.is_online()
        await self.report(online)
        return online

    async def start(self) -> None:
        """Start the background polling loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background polling loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        interval = max(0.1, float(self.config.connectivity_poll_interval_seconds))
        while not self._stopping.is_set():
            try:
                await self.poll_once()
            except (OSError, httpx.HTTPError) as exc:
                logger.warning("Connectivity poll failed: %s", exc)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
