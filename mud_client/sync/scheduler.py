from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class PeriodicPoller:
    """Launches `poll` every `interval` seconds on the running event loop.

    A tick never waits for the previous poll: slow responses overlap and each one
    still runs to completion. Pollers are only safe to use with idempotent updates.
    """

    def __init__(self, *, name: str, poll: Callable[[], Awaitable[object]], interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._poll = poll
        self._ticker: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def _guarded_poll(self) -> None:
        try:
            await self._poll()
        except Exception:
            # One bad tick must not stop the next one.
            logger.exception("Poller %s tick failed", self.name)

    def tick(self) -> asyncio.Task[None]:
        task = asyncio.create_task(self._guarded_poll(), name=f"{self.name}-poll")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._ticker = asyncio.create_task(self._run(), name=f"{self.name}-ticker")

    async def stop(self) -> None:
        """Stop ticking, then let polls already in flight finish."""

        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
