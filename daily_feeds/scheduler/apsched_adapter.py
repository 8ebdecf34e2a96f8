"""APScheduler wrapper running the pipeline once a day."""

from __future__ import annotations

from datetime import time
from typing import Callable

import structlog
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

DAILY_JOB_ID = "daily-feeds::run"


class APSchedulerAdapter:
    """Manage the single daily ingestion job."""

    def __init__(self, scheduler: BlockingScheduler | None = None) -> None:
        self.scheduler = scheduler or BlockingScheduler()
        self.logger = structlog.get_logger("daily_feeds").bind(component="scheduler")
        self.started = False

    def schedule_daily(self, at: time, callback: Callable[[], object]) -> None:
        trigger = self._build_trigger(at)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=DAILY_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.logger.info("job_scheduled", at=at.isoformat(timespec="minutes"))

    def start(self) -> None:
        """Start the scheduler; blocks until shutdown for the blocking scheduler."""

        if not self.started:
            self.started = True
            self.logger.info("apscheduler_started")
            self.scheduler.start()

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    @staticmethod
    def _build_trigger(at: time) -> CronTrigger:
        return CronTrigger(hour=at.hour, minute=at.minute, second=at.second)


__all__ = ["APSchedulerAdapter", "DAILY_JOB_ID"]
