from functools import lru_cache
from celery import shared_task
from celery.utils.log import get_task_logger
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from prayerfast.db.session import SessionLocal
from prayerfast.utils.timezone import utc_now
from .celery_app import celery_app  # noqa: F401
from .config import settings
from .dispatcher import FcmPushAdapter
from .repository import cleanup_inactive_tokens, retention_cutoff
from .scheduler import build_scheduler
from .schemas import ReminderJob
from .worker import ReminderWorker

logger = get_task_logger(__name__)


@lru_cache(maxsize=1)
def get_push_adapter() -> FcmPushAdapter:
    return FcmPushAdapter(session_factory=SessionLocal)


@shared_task(name="fasting.tick", ignore_result=True)
def tick_task() -> int:
    """One scheduler tick. Not retried: a failed tick is simply lost for that minute."""
    result = build_scheduler().tick()
    return result.enqueued


@shared_task(
    name="fasting.send_prayer_reminder",
    bind=True,
    acks_late=True,
    autoretry_for=(OperationalError,),
    max_retries=settings.JOB_MAX_RETRIES,
    retry_backoff=settings.JOB_RETRY_BACKOFF_SECONDS,
    retry_backoff_max=settings.JOB_RETRY_BACKOFF_MAX_SECONDS,
    retry_jitter=True,
)
def send_prayer_reminder_task(self, payload: dict) -> str:
    """Consume the reminder queue. Safe to run any number of times per job."""
    try:
        job = ReminderJob.model_validate(payload)
    except ValidationError as e:
        # A malformed message can never succeed; drop it instead of retrying
        logger.error(f"❌ [Worker] Rejecting malformed reminder payload {payload!r}: {e}")
        return "rejected"

    db: Session = SessionLocal()
    try:
        outcome = ReminderWorker(db, get_push_adapter()).process(job)
    finally:
        db.close()
    return outcome.value


@shared_task(name="devices.cleanup_inactive", ignore_result=True)
def cleanup_inactive_tokens_task() -> int:
    """Delete device tokens that have been inactive longer than the retention window."""
    db: Session = SessionLocal()
    try:
        cutoff = retention_cutoff(utc_now(), settings.INACTIVE_TOKEN_RETENTION_DAYS)
        deleted = cleanup_inactive_tokens(db, older_than=cutoff)
    finally:
        db.close()
    logger.info(f"🧹 [Devices] Deleted {deleted} inactive device token(s) older than {cutoff.isoformat()}")
    return deleted
