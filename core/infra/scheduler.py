"""
Scheduler infrastructure for the periodic scan.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from croniter import croniter


logger = logging.getLogger(__name__)

SCAN_JOB_ID = "weekly_scan"


class ScanInProgress(Exception):
    """Raised when a scan is requested while another one is running."""


class ScanGuard:
    """Single-slot guard: at most one scan runs in the process at a time."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        # check-and-acquire happens without yielding to the loop
        if self._lock.locked():
            raise ScanInProgress("A scan is already in progress")
        await self._lock.acquire()
        try:
            yield
        finally:
            self._lock.release()


class Scheduler:
    """Async task scheduler wrapper around APScheduler (in-memory job store)."""

    def __init__(self, timezone: str = "UTC"):
        job_defaults = {
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 60  # seconds
        }

        self._scheduler = AsyncIOScheduler(
            job_defaults=job_defaults,
            timezone=timezone
        )
        self._started = False

    async def start(self) -> None:
        """Start the scheduler."""
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("Scheduler started")

    async def stop(self) -> None:
        """Stop the scheduler."""
        if self._started:
            self._scheduler.shutdown()
            self._started = False
            logger.info("Scheduler stopped")

    def add_cron_job(
        self,
        func: Callable,
        cron_expression: str,
        job_id: Optional[str] = None,
        **kwargs
    ) -> None:
        """Add a job that runs on a cron schedule."""
        if not self._validate_cron_expression(cron_expression):
            raise ValueError(f"Invalid cron expression: {cron_expression}")

        parts = cron_expression.split()
        if len(parts) != 5:
            raise ValueError("Cron expression must have 5 parts: minute hour day month day_of_week")

        trigger = CronTrigger.from_crontab(cron_expression, timezone=self._scheduler.timezone)

        self._scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            replace_existing=True,
            **kwargs
        )

        logger.info(f"Added cron job: {job_id or func.__name__} ({cron_expression})")

    def _validate_cron_expression(self, cron_expression: str) -> bool:
        """Validate cron expression using croniter."""
        if not croniter.is_valid(cron_expression):
            logger.error(f"Invalid cron expression '{cron_expression}'")
            return False
        return True

    def list_jobs(self) -> Dict[str, Any]:
        """List all scheduled jobs."""
        jobs = {}
        for job in self._scheduler.get_jobs():
            jobs[job.id] = {
                "name": job.name,
                "next_run": getattr(job, "next_run_time", None),
                "trigger": str(job.trigger),
            }
        return jobs


def make_scheduled_scan(
    run_scan: Callable[[], Awaitable[Any]],
    guard: ScanGuard,
) -> Callable[[], Awaitable[None]]:
    """Wrap ``run_scan`` for the scheduler: skip when busy, log failures."""

    async def scheduled_scan() -> None:
        if guard.busy:
            logger.info("Scheduled scan skipped: another scan is still running")
            return
        try:
            async with guard.hold():
                logger.info("Launching scheduled scan")
                result = await run_scan()
                logger.info(f"Scheduled scan sent: {result}")
        except ScanInProgress:
            logger.info("Scheduled scan skipped: another scan is still running")
        except Exception:
            logger.exception("Scheduled scan failed")

    return scheduled_scan


def schedule_scan(
    scheduler: Scheduler,
    run_scan: Callable[[], Awaitable[Any]],
    guard: ScanGuard,
    cron_expression: str,
) -> None:
    """Register the periodic scan job on ``scheduler``."""
    scheduler.add_cron_job(
        make_scheduled_scan(run_scan, guard),
        cron_expression=cron_expression,
        job_id=SCAN_JOB_ID,
        name="Missing metafields scan",
    )
