from __future__ import annotations

import asyncio

import pytest

from conftest import CALLBACK_URL, FakeBackend
from pyvstore.controller import SessionController
from pyvstore.gateway import ApiGateway
from pyvstore.models.envelope import ApiResponse
from pyvstore.models.game_data import GameDataHealth
from pyvstore.polling import PeriodicPoller, health_poller


async def _wait_for(predicate, timeout: float = 1.0) -> None:
    async def _spin() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_spin(), timeout)


def test_interval_must_be_positive() -> None:
    async def noop() -> None:
        return None

    with pytest.raises(ValueError, match="interval"):
        PeriodicPoller("bad", noop, 0)
    with pytest.raises(ValueError):
        PeriodicPoller("bad", noop, -1.0)


@pytest.mark.asyncio
async def test_poller_runs_repeatedly_until_stopped() -> None:
    calls: list[int] = []

    async def tick() -> None:
        calls.append(len(calls))

    poller = PeriodicPoller("tick", tick, 0.005)
    poller.start()
    assert poller.is_running
    await _wait_for(lambda: poller.runs >= 3)
    await poller.stop()

    assert not poller.is_running
    settled = len(calls)
    await asyncio.sleep(0.03)
    assert len(calls) == settled
    assert poller.failures == 0


@pytest.mark.asyncio
async def test_poller_keeps_schedule_after_failures(caplog: pytest.LogCaptureFixture) -> None:
    attempts = 0

    async def flaky() -> None:
        nonlocal attempts
        attempts += 1
        if attempts % 2:
            raise RuntimeError("backend hiccup")

    async with PeriodicPoller("flaky", flaky, 0.005) as poller:
        await _wait_for(lambda: poller.runs >= 4)

    assert poller.failures >= 2
    assert poller.runs - poller.failures >= 2
    assert "Poll flaky failed" in caplog.text


@pytest.mark.asyncio
async def test_start_is_idempotent() -> None:
    started = asyncio.Event()

    async def tick() -> None:
        started.set()

    poller = PeriodicPoller("tick", tick, 10.0)
    poller.start()
    first = poller._task
    poller.start()
    assert poller._task is first

    await asyncio.wait_for(started.wait(), 1.0)
    await poller.stop()
    await poller.stop()
    assert not poller.is_running


@pytest.mark.asyncio
async def test_delayed_first_run() -> None:
    calls = 0

    async def tick() -> None:
        nonlocal calls
        calls += 1

    async with PeriodicPoller("later", tick, 10.0, run_immediately=False):
        await asyncio.sleep(0.01)
        assert calls == 0


@pytest.mark.asyncio
async def test_health_poller_reports_status(gateway: ApiGateway, backend: FakeBackend) -> None:
    results: list[ApiResponse[GameDataHealth]] = []

    poller = health_poller(gateway, results.append, interval=0.005)
    assert poller.name == "game-data-health"
    async with poller:
        await _wait_for(lambda: len(results) >= 2)

    assert all(result.success for result in results)
    assert results[0].data is not None
    assert results[0].data.healthy
    assert backend.count("/game-data/health") >= 2


@pytest.mark.asyncio
async def test_health_poller_reports_failures_without_stopping(
    gateway: ApiGateway,
    backend: FakeBackend,
) -> None:
    results: list[ApiResponse[GameDataHealth]] = []
    backend.network_down.add("/game-data/health")

    async with health_poller(gateway, results.append, interval=0.005):
        await _wait_for(lambda: len(results) >= 2)

    assert [result.error for result in results[:2]] == ["network_error", "network_error"]


def test_health_poller_defaults_to_configured_interval(gateway: ApiGateway) -> None:
    poller = health_poller(gateway, lambda _result: None)
    assert poller._interval == gateway.config.health_poll_interval


@pytest.mark.asyncio
async def test_sessions_poller_keeps_registry_fresh(gateway: ApiGateway, backend: FakeBackend) -> None:
    controller = SessionController(gateway)
    await controller.initialize()
    assert await controller.login(CALLBACK_URL)

    async with controller.sessions_poller(interval=0.005):
        await _wait_for(lambda: controller.registry is not None)
        assert controller.registry is not None
        assert controller.registry.count == 3

        backend.live.discard("u3")
        await _wait_for(lambda: controller.registry is not None and "u3" not in controller.registry)

    assert controller.registry is not None
    assert sorted(controller.registry.account_ids()) == ["u1", "u2"]


@pytest.mark.asyncio
async def test_sessions_poller_idle_while_signed_out(gateway: ApiGateway, backend: FakeBackend) -> None:
    controller = SessionController(gateway)
    await controller.initialize()

    async with controller.sessions_poller(interval=0.005) as poller:
        await _wait_for(lambda: poller.runs >= 3)

    assert backend.calls == []
    assert controller.registry is None
