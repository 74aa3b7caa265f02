"""
Background scheduler service for periodic tasks.

Runs named jobs on fixed intervals inside the FastAPI process, so stale
rate-limit counters and expired token rows are cleaned up without an
external cron.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from auth_api.utils import capture_exception, logger

JobFunc = Callable[[], Awaitable[object]]


@dataclass
class ScheduledJob:
    name: str
    interval: float  # seconds
    func: JobFunc
    task: Optional[asyncio.Task] = field(default=None, repr=False)


class SchedulerService:
    """
    Background scheduler that runs periodic jobs.

    Jobs registered while running start immediately; a job added under an
    existing name replaces it.
    """

    def __init__(self, initial_delay: float = 5.0):
        self._jobs: dict[str, ScheduledJob] = {}
        self._running = False
        # Wait before the first run to let the app fully initialize
        self.initial_delay = initial_delay

    @property
    def running(self) -> bool:
        return self._running

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs.keys())

    def add_job(self, name: str, interval: float, func: JobFunc) -> None:
        if interval <= 0:
            raise ValueError(f"Job interval must be positive: {name}")

        existing = self._jobs.pop(name, None)
        if existing and existing.task:
            existing.task.cancel()

        job = ScheduledJob(name=name, interval=interval, func=func)
        self._jobs[name] = job
        if self._running:
            job.task = asyncio.create_task(self._run_job(job))

    def remove_job(self, name: str) -> bool:
        job = self._jobs.pop(name, None)
        if job is None:
            return False
        if job.task:
            job.task.cancel()
        return True

    async def start(self):
        """Start the background scheduler."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        for job in self._jobs.values():
            job.task = asyncio.create_task(self._run_job(job))
        logger.info(f"Background scheduler started (jobs={self.job_names})")

    async def stop(self):
        """Stop the background scheduler gracefully."""
        if not self._running:
            return

        self._running = False
        for job in self._jobs.values():
            if job.task:
                job.task.cancel()
                try:
                    await job.task
                except asyncio.CancelledError:
                    pass
                job.task = None
        logger.info("Background scheduler stopped")

    async def _run_job(self, job: ScheduledJob):
        """Loop for one job until the scheduler stops."""
        try:
            await asyncio.sleep(self.initial_delay)
            while self._running:
                try:
                    await job.func()
                except Exception as e:
                    logger.error(f"Scheduler error in job '{job.name}': {e}", exc_info=True)
                    capture_exception(e)

                await asyncio.sleep(job.interval)
        except asyncio.CancelledError:
            pass


# Global scheduler instance
scheduler_service = SchedulerService()
