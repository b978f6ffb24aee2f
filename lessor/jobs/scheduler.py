"""In-process interval scheduler.

Runs an async job on a fixed cadence inside the API process. Used for
the dispatcher and the health monitor when no external scheduler
(Hatchet, cron) drives them.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from lessor.observability.logging import get_logger

logger = get_logger(__name__)


class IntervalScheduler:
    """Background loop that awaits a job every interval_seconds.

    A failing run is logged and the loop continues with the next tick.
    """

    def __init__(
        self,
        name: str,
        job: Callable[[], Awaitable[Any]],
        interval_seconds: float,
    ) -> None:
        """Initialize scheduler.

        Args:
            name: Label used in log events
            job: Coroutine function run on each tick
            interval_seconds: Delay between the end of one run and the next
        """
        self._name = name
        self._job = job
        self._interval_seconds = interval_seconds
        self._running = False
        self._loop_task: asyncio.Task | None = None
        self.runs = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the scheduler loop."""
        if self._running:
            logger.warning("scheduler_already_running", scheduler=self._name)
            return

        self._running = True
        self._loop_task = asyncio.create_task(self._run_loop())

        logger.info(
            "scheduler_started",
            scheduler=self._name,
            interval_seconds=self._interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the scheduler loop, cancelling an in-flight run."""
        if not self._running:
            return

        self._running = False

        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        logger.info("scheduler_stopped", scheduler=self._name)

    async def _run_loop(self) -> None:
        while self._running:
            await self.run_once()
            await asyncio.sleep(self._interval_seconds)

    async def run_once(self) -> None:
        """Run the job once, logging instead of raising on failure."""
        try:
            await self._job()
        except Exception as e:
            self.failures += 1
            logger.error(
                "scheduler_job_failed",
                scheduler=self._name,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self.runs += 1
