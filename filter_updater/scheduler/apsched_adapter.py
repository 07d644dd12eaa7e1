"""APScheduler wrapper running the refresh cycle as a background job."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .refresh_loop import RefreshLoop

REFRESH_JOB_ID = "filters::refresh"


class FilterScheduler:
    """Run :meth:`RefreshLoop.run_cycle` every fixed period, one cycle at a time."""

    def __init__(
        self,
        loop: RefreshLoop,
        period: timedelta,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.loop = loop
        self.period = period
        self.scheduler = BackgroundScheduler()
        self.logger = (logger or structlog.get_logger("filter_updater")).bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if self.started:
            return
        self.scheduler.add_job(
            self.loop.run_cycle,
            trigger=self._build_trigger(),
            id=REFRESH_JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        self.started = True
        self.logger.info("apscheduler_started", period_seconds=self.period.total_seconds())

    def shutdown(self, wait: bool = True) -> None:
        if self.started:
            self.scheduler.shutdown(wait=wait)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def _build_trigger(self) -> IntervalTrigger:
        seconds = self.period.total_seconds()
        if seconds <= 0:
            raise ValueError("Refresh period must be positive")
        return IntervalTrigger(seconds=seconds)


__all__ = ["FilterScheduler", "REFRESH_JOB_ID"]
