from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, update, delete, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

from prayerfast.models import (
    FastingSession,
    FastReminderLog,
    DeviceToken,
    Notification,
    FAST_STATUS_ACTIVE,
)
from .schemas import ReminderJob


LEDGER_SLOT_COLUMNS = ["fast_id", "date_key", "time_key"]


# --- Session store ---

def list_reminder_sessions(db: Session) -> List[FastingSession]:
    """All active sessions with reminders enabled."""
    stmt = (
        select(FastingSession)
        .where(FastingSession.status == FAST_STATUS_ACTIVE)
        .where(FastingSession.reminder_enabled.is_(True))
        .order_by(FastingSession.id.asc())
    )
    return list(db.execute(stmt).scalars())


# --- Dedup ledger ---

def ledger_exists(db: Session, fast_id: int, date_key: str, time_key: str) -> bool:
    stmt = (
        select(FastReminderLog.id)
        .where(FastReminderLog.fast_id == fast_id)
        .where(FastReminderLog.date_key == date_key)
        .where(FastReminderLog.time_key == time_key)
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def record_reminder_sent(db: Session, job: ReminderJob, sent_at: datetime) -> bool:
    """Insert the ledger row for the job's slot in one atomic statement.

    Returns True when this call inserted the row and False when the slot was
    already recorded (by an earlier delivery or a concurrent worker). The caller
    owns the transaction.
    """
    values = {
        "fast_id": job.fast_id,
        "user_id": job.user_id,
        "date_key": job.date_key,
        "time_key": job.time_key,
        "sent_at": sent_at,
    }
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(FastReminderLog).values(**values).on_conflict_do_nothing(
            index_elements=LEDGER_SLOT_COLUMNS
        )
        return db.execute(stmt).rowcount == 1
    if dialect == "sqlite":
        stmt = sqlite.insert(FastReminderLog).values(**values).on_conflict_do_nothing(
            index_elements=LEDGER_SLOT_COLUMNS
        )
        return db.execute(stmt).rowcount == 1

    # Dialects without ON CONFLICT: let the unique constraint reject the insert
    try:
        with db.begin_nested():
            db.execute(insert(FastReminderLog).values(**values))
    except IntegrityError:
        return False
    return True


def list_reminder_logs(db: Session, fast_id: int, limit: int = 100) -> List[FastReminderLog]:
    stmt = (
        select(FastReminderLog)
        .where(FastReminderLog.fast_id == fast_id)
        .order_by(FastReminderLog.date_key.desc(), FastReminderLog.time_key.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


# --- Notifications ---

def add_notification(db: Session, job: ReminderJob, notification_type: str) -> Notification:
    """Stage the in-app notification for a job; committed with the ledger row."""
    notification = Notification(
        user_id=job.user_id,
        type=notification_type,
        title=job.title,
        body=job.body,
        data=dict(job.data),
    )
    db.add(notification)
    db.flush()
    return notification


# --- Device tokens ---

def list_active_tokens(db: Session, user_id: int) -> List[str]:
    stmt = (
        select(DeviceToken.token)
        .where(DeviceToken.user_id == user_id)
        .where(DeviceToken.is_active.is_(True))
        .order_by(DeviceToken.updated_at.desc())
    )
    return list(db.execute(stmt).scalars())


def list_device_tokens(db: Session, user_id: int, limit: int = 100) -> List[DeviceToken]:
    return (
        db.query(DeviceToken)
        .filter(DeviceToken.user_id == user_id)
        .order_by(DeviceToken.updated_at.desc())
        .limit(limit)
        .all()
    )


def deactivate_tokens(db: Session, user_id: int, tokens: Iterable[str], now: datetime) -> int:
    """Bulk-deactivate the given tokens of one user. Only active rows are touched."""
    tokens = list(tokens)
    if not tokens:
        return 0
    result = db.execute(
        update(DeviceToken)
        .where(DeviceToken.user_id == user_id)
        .where(DeviceToken.token.in_(tokens))
        .where(DeviceToken.is_active.is_(True))
        .values(is_active=False, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def touch_tokens(db: Session, user_id: int, tokens: Iterable[str], now: datetime) -> int:
    """Record a successful delivery on still-active tokens."""
    tokens = list(tokens)
    if not tokens:
        return 0
    result = db.execute(
        update(DeviceToken)
        .where(DeviceToken.user_id == user_id)
        .where(DeviceToken.token.in_(tokens))
        .where(DeviceToken.is_active.is_(True))
        .values(last_active_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def cleanup_inactive_tokens(
    db: Session,
    older_than: datetime,
    user_id: Optional[int] = None,
) -> int:
    """Delete inactive tokens last updated before ``older_than``. Active tokens are never deleted."""
    stmt = (
        delete(DeviceToken)
        .where(DeviceToken.is_active.is_(False))
        .where(DeviceToken.updated_at < older_than)
        .execution_options(synchronize_session=False)
    )
    if user_id is not None:
        stmt = stmt.where(DeviceToken.user_id == user_id)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount or 0


def retention_cutoff(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)
