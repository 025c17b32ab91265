# Overview: Clock-driven scheduler that fires the daily summary job at midnight UTC.

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from .time_utils import utcnow

logger = logging.getLogger(__name__)


class DailySummaryScheduler:
    """
    Runs ``job(day)`` once each time the clock's UTC date rolls over, passing
    the day that just ended.

    The clock is injected so tests drive it with a virtual clock; tick() does
    all the work and run() only loops over it.

    Known limitation: the last seen date lives in memory. A restart across
    midnight skips that day, and two running processes both send.
    """

    def __init__(
        self,
        job: Callable[[date], object],
        *,
        clock: Callable[[], datetime] = utcnow,
        interval: float = 60.0,
    ):
        self.job = job
        self.clock = clock
        self.interval = interval
        self.last_date: Optional[date] = None

    def tick(self) -> Optional[date]:
        """
        Check the clock once. Returns the day the job ran for, or None.
        """
        today = self.clock().date()

        if self.last_date is None:
            self.last_date = today
            return None

        if today <= self.last_date:
            return None

        finished_day = today - timedelta(days=1)
        self.last_date = today
        try:
            self.job(finished_day)
        except Exception:
            logger.exception("Daily summary job failed for %s", finished_day.isoformat())
        return finished_day

    def run(self, stop_event: threading.Event) -> None:
        """Tick every ``interval`` seconds until ``stop_event`` is set."""
        logger.info("Daily summary scheduler started (interval=%ss)", self.interval)
        while not stop_event.is_set():
            self.tick()
            stop_event.wait(self.interval)
        logger.info("Daily summary scheduler stopped")
