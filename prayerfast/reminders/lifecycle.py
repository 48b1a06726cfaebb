"""
Set-based status transitions for fasting sessions
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import update
from sqlalchemy.orm import Session

from prayerfast.models import (
    FastingSession,
    FAST_STATUS_UPCOMING,
    FAST_STATUS_ACTIVE,
    FAST_STATUS_COMPLETED,
)
from .metrics import lifecycle_transitions_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleResult:
    activated: int
    completed: int


class FastLifecycleUpdater:
    """Advances session status with one conditional UPDATE per transition.

    The WHERE clause only matches rows still eligible for the transition, so
    running the same tick twice is a no-op the second time.
    """

    def advance(self, db: Session, now: datetime) -> LifecycleResult:
        activated = db.execute(
            update(FastingSession)
            .where(FastingSession.status == FAST_STATUS_UPCOMING)
            .where(FastingSession.start_time <= now)
            .values(status=FAST_STATUS_ACTIVE, updated_at=now)
            .execution_options(synchronize_session=False)
        ).rowcount or 0

        completed = db.execute(
            update(FastingSession)
            .where(FastingSession.status == FAST_STATUS_ACTIVE)
            .where(FastingSession.end_time <= now)
            .values(status=FAST_STATUS_COMPLETED, completed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        ).rowcount or 0

        db.commit()

        if activated:
            lifecycle_transitions_total.labels(to_status=FAST_STATUS_ACTIVE).inc(activated)
        if completed:
            lifecycle_transitions_total.labels(to_status=FAST_STATUS_COMPLETED).inc(completed)
        if activated or completed:
            logger.info(f"🔄 [Lifecycle] now={now.isoformat()} activated={activated} completed={completed}")
        return LifecycleResult(activated=activated, completed=completed)
