"""Scheduler service - runs the probe on a repeating interval.

A single APScheduler interval job drives the probe. When the dashboard
saves new settings the job is removed and recreated with the new interval,
and an immediate check is fired so the change is visible right away. The
keepalive ping and record retention run as separate jobs on the same
scheduler.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional, Set

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import settings
from .checker import CheckerService, checker_service
from .keepalive import KeepaliveService, keepalive_interval, keepalive_service
from .store import MonitorStore, StoreError, monitor_store

logger = logging.getLogger(__name__)

CHECK_JOB_ID = "run_check"
KEEPALIVE_JOB_ID = "keepalive"
CLEANUP_JOB_ID = "cleanup_old_records"

DEFAULT_INTERVAL_SECONDS = 150
MIN_INTERVAL_SECONDS = 5


class SchedulerService:
    """Owns the probe timer. At most one probe job exists at a time."""

    def __init__(
        self,
        checker: Optional[CheckerService] = None,
        store: Optional[MonitorStore] = None,
        keepalive: Optional[KeepaliveService] = None,
        retention_days: Optional[int] = None,
    ):
        self.checker = checker or checker_service
        self.store = store or monitor_store
        self.keepalive = keepalive or keepalive_service
        self.retention_days = settings.check_retention_days if retention_days is None else retention_days
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._check_job: Optional[Job] = None
        self._keepalive_job: Optional[Job] = None
        self._pending: Set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def check_job(self) -> Optional[Job]:
        return self._check_job

    @property
    def keepalive_job(self) -> Optional[Job]:
        return self._keepalive_job

    async def start(self):
        """Start the scheduler and fire an immediate check."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.start()
        self._running = True

        if self.retention_days > 0:
            self.scheduler.add_job(
                self._cleanup_old_records,
                trigger=IntervalTrigger(hours=1),
                id=CLEANUP_JOB_ID,
                replace_existing=True,
                max_instances=1,
            )

        await self._schedule_jobs()
        logger.info("Scheduler started")

    async def restart(self):
        """Re-read the settings, recreate the jobs and fire an immediate check."""
        if not self._running:
            await self.start()
            return
        await self._schedule_jobs()
        logger.info("Scheduler restarted")

    async def stop(self):
        """Stop the scheduler."""
        if not self._running:
            return
        self._cancel_check_job()
        self._cancel_keepalive_job()
        self.scheduler.shutdown(wait=False)
        self._running = False
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
        logger.info("Scheduler stopped")

    def _cancel_check_job(self):
        if self._check_job is not None:
            self._check_job.remove()
            self._check_job = None

    def _cancel_keepalive_job(self):
        if self._keepalive_job is not None:
            self._keepalive_job.remove()
            self._keepalive_job = None

    async def _schedule_jobs(self):
        try:
            config = await self.store.get_settings()
        except StoreError as e:
            logger.error(f"Could not read settings, using defaults: {e}")
            config = None

        interval = DEFAULT_INTERVAL_SECONDS
        keepalive_url = None
        keepalive_seconds = None
        if config is not None:
            interval = max(config.check_interval_seconds or DEFAULT_INTERVAL_SECONDS, MIN_INTERVAL_SECONDS)
            keepalive_url = config.keepalive_url
            keepalive_seconds = config.keepalive_interval_seconds

        # Always tear down the previous timer before creating a new one
        self._cancel_check_job()
        self._check_job = self.scheduler.add_job(
            self._run_check,
            trigger=IntervalTrigger(seconds=interval),
            id=CHECK_JOB_ID,
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=interval,
        )
        logger.info(f"Probe scheduled every {interval}s")
        self._fire(self._run_check())

        self._cancel_keepalive_job()
        if keepalive_url:
            seconds = keepalive_interval(keepalive_seconds)
            self._keepalive_job = self.scheduler.add_job(
                self.keepalive.ping,
                trigger=IntervalTrigger(seconds=seconds),
                args=[keepalive_url],
                id=KEEPALIVE_JOB_ID,
                replace_existing=True,
                max_instances=1,
            )
            logger.info(f"Keepalive for {keepalive_url} scheduled every {seconds}s")
            self._fire(self.keepalive.ping(keepalive_url))

    def _fire(self, coro):
        """Run ``coro`` now, outside the regular schedule."""
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_check(self):
        """Scheduled probe. Errors are logged so the next tick still fires."""
        try:
            await self.checker.run_check()
        except Exception as e:
            logger.error(f"Error running check: {e}")

    async def _cleanup_old_records(self):
        """Delete check records older than the retention period."""
        try:
            cutoff = datetime.utcnow() - timedelta(days=self.retention_days)
            deleted = await self.store.prune_checks(cutoff)
            logger.info(f"Cleaned up {deleted} old check records")
        except StoreError as e:
            logger.error(f"Error cleaning up records: {e}")


# Global instance
scheduler_service = SchedulerService()


def get_scheduler() -> SchedulerService:
    """Dependency returning the shared scheduler."""
    return scheduler_service
