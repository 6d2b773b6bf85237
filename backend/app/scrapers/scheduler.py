"""APScheduler-based cache refresh scheduler.

This module provides a background job scheduler that periodically
re-scrapes the catalog and replaces the cache contents.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.job import Job

from app.scrapers.scraper_service import run_scrape_job
from app.services.cache_service import CacheService, get_cache_service

logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "refresh_catalog"


class RefreshScheduler:
    """Manages the periodic catalog refresh job using APScheduler.

    This scheduler:
    - Starts and stops the background scheduler
    - Runs at most one refresh at a time
    - Skips a run when a scrape is already pending
    - Logs errors without stopping the scheduler
    """

    def __init__(self, cache: Optional[CacheService] = None):
        """Initialize refresh scheduler.

        Args:
            cache: Cache to refresh (defaults to the global instance)
        """
        self.cache = cache or get_cache_service()
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="refresh_scheduler")
        self._job_id: Optional[str] = None

    def start(self) -> None:
        """Start the scheduler.

        This does NOT add the refresh job; call schedule_refresh() for that.
        """
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("scheduler_started")
        else:
            self.logger.warning("scheduler_already_running")

    def stop(self) -> None:
        """Stop the scheduler without waiting for a running refresh."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def schedule_refresh(
        self,
        interval_minutes: int,
        limit: Optional[int] = None,
        delay_seconds: int = 0,
    ) -> Optional[Job]:
        """Add (or replace) the periodic refresh job.

        Args:
            interval_minutes: How often to re-scrape; non-positive disables
            limit: Maximum number of models per scrape, None for all
            delay_seconds: Initial delay before the first run

        Returns:
            APScheduler Job instance, or None when disabled
        """
        if interval_minutes <= 0:
            self.logger.info("refresh_disabled", interval_minutes=interval_minutes)
            return None

        start_date = datetime.now(timezone.utc) + timedelta(seconds=max(0, delay_seconds))
        trigger = IntervalTrigger(
            minutes=interval_minutes,
            start_date=start_date,
            timezone="UTC",
        )

        job = self.scheduler.add_job(
            func=self._run_refresh_wrapper,
            trigger=trigger,
            args=[limit],
            id=REFRESH_JOB_ID,
            name="Refresh model catalog",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping refreshes
        )
        self._job_id = job.id

        self.logger.info(
            "refresh_job_added",
            interval_minutes=interval_minutes,
            limit=limit,
            next_run=job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
        )
        return job

    def remove_refresh(self) -> bool:
        """Remove the refresh job.

        Returns:
            True if a job was removed, False if none was scheduled
        """
        if not self._job_id:
            self.logger.warning("refresh_job_not_found")
            return False

        self.scheduler.remove_job(self._job_id)
        self._job_id = None
        self.logger.info("refresh_job_removed")
        return True

    async def _run_refresh_wrapper(self, limit: Optional[int]) -> None:
        """Job body called by APScheduler."""
        if self.cache.is_pending():
            self.logger.info("refresh_skipped", reason="scrape_already_pending")
            return

        self.cache.set_pending()
        await run_scrape_job(limit=limit, cache=self.cache)

    def get_jobs_status(self) -> dict:
        """Get status of the scheduled refresh job.

        Returns:
            Dict keyed by job id with next run time and trigger
        """
        jobs = {}
        if self._job_id:
            job = self.scheduler.get_job(self._job_id)
            if job:
                next_run = getattr(job, "next_run_time", None)
                jobs[self._job_id] = {
                    "next_run": next_run.isoformat() if next_run else None,
                    "trigger": str(job.trigger),
                }
        return jobs

    def is_running(self) -> bool:
        return self.scheduler.running
