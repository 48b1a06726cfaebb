#!/usr/bin/env python3
"""
Per-minute clock tick: advance fasting session status, then enqueue the
prayer reminders due in the current UTC minute.

Production runs the tick from Celery beat (task ``fasting.tick``). This module
can also run standalone as a simple loop:

    python -m prayerfast.reminders.scheduler [--once]
"""
import argparse
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from sqlalchemy.orm import Session

from prayerfast.utils.timezone import utc_now, to_utc_aware, slot_keys
from .config import settings
from .lifecycle import FastLifecycleUpdater
from .metrics import scheduler_ticks_total, scheduler_tick_failures_total, reminder_candidates_enqueued_total
from .repository import list_reminder_sessions
from .schemas import ReminderJob
from .selector import select_reminder_candidates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    now: datetime
    date_key: str
    time_key: str
    activated: int
    completed: int
    enqueued: int


class ClockTickScheduler:
    """Runs one tick per period against an injectable clock.

    The clock is read once per tick; that single ``now`` drives the lifecycle
    update, the slot keys and the candidate selection. Ticks are not reentrant
    within one scheduler, but nothing prevents two schedulers (or a late beat
    message) from overlapping: the reminder ledger keeps that safe.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        enqueue: Callable[[ReminderJob], None],
        clock: Callable[[], datetime] = utc_now,
        lifecycle: Optional[FastLifecycleUpdater] = None,
        interval_seconds: int = settings.TICK_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        timer: Callable[[], float] = time.time,
    ):
        self.session_factory = session_factory
        self.enqueue = enqueue
        self.clock = clock
        self.lifecycle = lifecycle or FastLifecycleUpdater()
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.timer = timer

    def tick(self) -> TickResult:
        now = to_utc_aware(self.clock())
        date_key, time_key = slot_keys(now)

        db = self.session_factory()
        try:
            # A store failure here aborts the tick before any reminder is selected
            lifecycle = self.lifecycle.advance(db, now)
            sessions = list_reminder_sessions(db)
        finally:
            db.close()

        jobs = select_reminder_candidates(sessions, now)
        for job in jobs:
            self.enqueue(job)

        scheduler_ticks_total.inc()
        if jobs:
            reminder_candidates_enqueued_total.inc(len(jobs))
        logger.info(
            f"🕒 [Tick] {date_key} {time_key} sessions={len(sessions)} enqueued={len(jobs)} "
            f"activated={lifecycle.activated} completed={lifecycle.completed}"
        )
        return TickResult(
            now=now,
            date_key=date_key,
            time_key=time_key,
            activated=lifecycle.activated,
            completed=lifecycle.completed,
            enqueued=len(jobs),
        )

    def run_once(self) -> Optional[TickResult]:
        """Run a tick. A failed tick is logged and counted; it is not retried."""
        try:
            return self.tick()
        except Exception:
            scheduler_tick_failures_total.inc()
            logger.exception("❌ [Tick] Tick failed; waiting for the next one")
            return None

    def _next_deadline(self, after: float) -> float:
        period = self.interval_seconds
        return (math.floor(after / period) + 1) * period

    def run_forever(self, max_ticks: Optional[int] = None) -> int:
        """Tick on period boundaries. Deadlines missed while a tick overran are skipped.

        Returns the number of ticks attempted (only reached when ``max_ticks`` is set).
        """
        ticks = 0
        deadline = self._next_deadline(self.timer())
        logger.info(f"▶️  [Tick] Scheduler started, interval={self.interval_seconds}s")
        while max_ticks is None or ticks < max_ticks:
            delay = deadline - self.timer()
            if delay > 0:
                self.sleep(delay)
            self.run_once()
            ticks += 1
            deadline = self._next_deadline(max(deadline, self.timer()))
        return ticks


def build_scheduler() -> ClockTickScheduler:
    from prayerfast.db.session import SessionLocal
    from .queue import FastingQueue

    return ClockTickScheduler(
        session_factory=SessionLocal,
        enqueue=FastingQueue.enqueue_prayer_reminder,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the fasting reminder clock tick")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    scheduler = build_scheduler()
    if args.once:
        scheduler.tick()
    else:
        scheduler.run_forever()


if __name__ == "__main__":
    main()
