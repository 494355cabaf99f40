"""APScheduler adapter - timers for scheduled notifications."""

import logging
from datetime import datetime, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class APSchedulerTimers:
    """
    APScheduler-backed timers.

    Implements TimerService protocol. Every timer is a one-off DateTrigger job;
    jobs may run late (no misfire grace limit) so a reminder is never dropped.
    """

    def __init__(self, timezone: tzinfo | None = None, scheduler: BaseScheduler | None = None):
        self.timezone = timezone or ZoneInfo("UTC")
        self._scheduler = scheduler or BackgroundScheduler(timezone=self.timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def arm(self, job_id: str, run_at: datetime, callback: Callable[[], None]) -> None:
        self._scheduler.add_job(
            callback,
            DateTrigger(run_date=run_at, timezone=self.timezone),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Armed timer {job_id} for {run_at.isoformat()}")

    def disarm(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
            logger.debug(f"Disarmed timer {job_id}")
        except JobLookupError:
            pass

    def every(self, job_id: str, minutes: int, callback: Callable[[], None]) -> None:
        """Run `callback` every `minutes`, starting one interval from now."""
        self._scheduler.add_job(
            callback,
            IntervalTrigger(minutes=minutes, timezone=self.timezone),
            id=job_id,
            replace_existing=True,
            coalesce=True,
        )

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Timer service started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Timer service stopped")
