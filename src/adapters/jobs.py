"""
In-process publication scheduler.

Runs the publish sweep on a fixed interval inside the server's event loop,
so sweeps and request handling interleave at I/O boundaries.

Key behaviors:
- start()/stop() lifecycle owned by the application lifespan
- stop() lets an in-flight sweep finish; it is never cancelled midway
- errors in a sweep are logged and the loop keeps going
"""

from __future__ import annotations

import asyncio
import logging

from src.components.publish import PublishSweeper, SweepOutput

logger = logging.getLogger(__name__)


class PublishScheduler:
    """
    Background task that calls PublishSweeper.run_sweep every interval.
    """

    def __init__(
        self,
        sweeper: PublishSweeper,
        interval_seconds: float = 60.0,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            sweeper: Sweep to run on each tick
            interval_seconds: Interval between sweeps
        """
        self._sweeper = sweeper
        self._interval = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._running = False

    def start(self) -> None:
        """Start the background loop. Must be called from a running event loop."""
        if self._running:
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._poll_loop())
        self._running = True
        logger.info("Publish scheduler started (interval: %.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop the scheduler, waiting for a sweep in progress to complete."""
        if not self._running:
            return

        self._stop_event.set()
        if self._task:
            await self._task
        await self._sweeper.drain()
        self._running = False
        logger.info("Publish scheduler stopped")

    async def trigger_now(self) -> SweepOutput:
        """Run a sweep immediately, outside the regular cadence."""
        return await self._sweeper.run_sweep()

    @property
    def is_running(self) -> bool:
        """Check if scheduler is active."""
        return self._running

    async def _poll_loop(self) -> None:
        """Background polling loop."""
        while not await self._wait_for_stop():
            try:
                result = await self._sweeper.run_sweep()
                if result.due > 0:
                    logger.info(
                        "Sweep processed %d due post(s): %d published, %d skipped, %d failed",
                        result.due,
                        len(result.published),
                        result.skipped,
                        result.failed,
                    )
            except Exception:
                logger.exception("Error in publish scheduler loop")

    async def _wait_for_stop(self) -> bool:
        """Sleep one interval. True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
        except TimeoutError:
            return False
        return True
