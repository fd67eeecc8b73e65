"""Fixed-interval background polling.

Pollers re-run on schedule whatever the previous outcome was; there is
no retry logic.  Owners must :meth:`PeriodicPoller.stop` them when the
view that consumes the results goes away.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyvstore.gateway import ApiGateway
    from pyvstore.models.envelope import ApiResponse
    from pyvstore.models.game_data import GameDataHealth

_logger = logging.getLogger(__name__)


class PeriodicPoller:
    """Run ``fn`` every ``interval`` seconds on the running event loop."""

    def __init__(
        self,
        name: str,
        fn: Callable[[], Awaitable[Any]],
        interval: float,
        *,
        run_immediately: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._name = name
        self._fn = fn
        self._interval = interval
        self._run_immediately = run_immediately
        self._task: asyncio.Task[None] | None = None
        self.runs = 0
        self.failures = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the polling loop.  No-op when already running."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"poll:{self._name}")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> PeriodicPoller:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def _run(self) -> None:
        if not self._run_immediately:
            await asyncio.sleep(self._interval)
        while True:
            try:
                await self._fn()
            except Exception:
                self.failures += 1
                _logger.warning("Poll %s failed", self._name, exc_info=True)
            self.runs += 1
            await asyncio.sleep(self._interval)


def health_poller(
    gateway: ApiGateway,
    on_result: Callable[[ApiResponse[GameDataHealth]], None],
    interval: float | None = None,
) -> PeriodicPoller:
    """Unstarted poller that reports game-data health to *on_result*."""

    async def _check() -> None:
        on_result(await gateway.get_game_data_health())

    return PeriodicPoller(
        "game-data-health",
        _check,
        interval or gateway.config.health_poll_interval,
    )
