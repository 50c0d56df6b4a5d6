"""Fixed-rate tick loop that drives timers and message delivery."""

import asyncio
import logging
from typing import Callable

from ..game.turn_timer import TICK_MS

logger = logging.getLogger(__name__)


class TickScheduler:
    """Calls a callback every tick (50ms) on the running event loop."""

    def __init__(self, on_tick: Callable[[], None], interval_ms: int = TICK_MS):
        self._on_tick = on_tick
        self._interval = interval_ms / 1000
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start ticking in a background task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop ticking and wait for the loop to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            try:
                self._on_tick()
            except Exception:
                logger.exception("Tick handler failed")
            next_tick += self._interval
            # Don't try to catch up on ticks missed while the loop was busy
            next_tick = max(next_tick, loop.time())
            await asyncio.sleep(next_tick - loop.time())
