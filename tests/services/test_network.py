import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from tests.conftest import StaticMonitor, make_settings

from uninexus_offline.services.network import ConnectivityMonitor


def _monitor(handler) -> ConnectivityMonitor:
    return ConnectivityMonitor(make_settings(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_reachability_accepts_statuses_below_500() -> None:
    assert await _monitor(lambda r: httpx.Response(404)).check_reachability() is True
    assert await _monitor(lambda r: httpx.Response(503)).check_reachability() is False


@pytest.mark.asyncio
async def test_reachability_false_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    assert await _monitor(handler).check_reachability() is False


@pytest.mark.asyncio
async def test_reachability_probes_configured_url() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(204)

    monitor = ConnectivityMonitor(
        make_settings(reachability_url="http://probe.test/generate_204"),
        transport=httpx.MockTransport(handler),
    )
    assert await monitor.check_reachability() is True
    assert seen == ["http://probe.test/generate_204"]


@pytest.mark.asyncio
async def test_check_link_opens_tcp_connection(mocker) -> None:
    writer = MagicMock()
    writer.wait_closed = AsyncMock()
    open_connection = mocker.patch(
        "uninexus_offline.services.network.asyncio.open_connection",
        new=AsyncMock(return_value=(MagicMock(), writer)),
    )

    assert await ConnectivityMonitor(make_settings()).check_link() is True
    open_connection.assert_awaited_once_with("api.test", 80)
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_check_link_false_when_connection_refused(mocker) -> None:
    mocker.patch(
        "uninexus_offline.services.network.asyncio.open_connection",
        new=AsyncMock(side_effect=ConnectionRefusedError()),
    )
    assert await ConnectivityMonitor(make_settings()).check_link() is False


@pytest.mark.asyncio
async def test_is_online_requires_link_and_reachability(mocker) -> None:
    monitor = ConnectivityMonitor(make_settings())
    mocker.patch.object(monitor, "check_link", new=AsyncMock(return_value=True))
    reach = mocker.patch.object(monitor, "check_reachability", new=AsyncMock(return_value=False))
    assert await monitor.is_online() is False

    reach.return_value = True
    assert await monitor.is_online() is True

    monitor.check_link.return_value = False
    reach.reset_mock()
    assert await monitor.is_online() is False
    reach.assert_not_awaited()


@pytest.mark.asyncio
async def test_report_notifies_only_on_transitions() -> None:
    monitor = StaticMonitor(make_settings())
    seen: list[bool] = []
    unsubscribe = monitor.subscribe(seen.append)

    assert await monitor.report(True) is True
    assert await monitor.report(True) is False
    assert await monitor.report(False) is True
    unsubscribe()
    unsubscribe()
    await monitor.report(True)

    assert seen == [True, False]
    assert monitor.connected is True


@pytest.mark.asyncio
async def test_async_subscribers_are_awaited_and_failures_isolated() -> None:
    monitor = StaticMonitor(make_settings())
    seen: list[bool] = []

    def broken(connected: bool) -> None:
        raise RuntimeError("subscriber bug")

    async def record(connected: bool) -> None:
        seen.append(connected)

    monitor.subscribe(broken)
    monitor.subscribe(record)

    await monitor.report(False)
    assert seen == [False]


@pytest.mark.asyncio
async def test_polling_loop_publishes_changes() -> None:
    monitor = StaticMonitor(make_settings(connectivity_poll_interval_seconds=0.1), online=False)
    seen: list[bool] = []
    monitor.subscribe(seen.append)

    await monitor.start()
    await asyncio.sleep(0.05)
    monitor.online = True
    await asyncio.sleep(0.2)
    await monitor.stop()

    assert seen == [False, True]
