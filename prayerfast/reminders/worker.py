"""
Idempotent consumer for prayer reminder jobs.

The queue may hand the same job to one or more workers any number of times.
The ``fast_reminder_logs`` unique constraint on (fast_id, date_key, time_key)
is what turns those deliveries into a single recorded reminder: the ledger row
is written with an atomic insert-or-detect-conflict, never a read followed by a
write.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from prayerfast.utils.timezone import utc_now
from .config import settings
from .dispatcher import PushDeliveryAdapter, PushOutcome
from .metrics import reminder_jobs_processed_total, push_dispatch_timeouts_total
from .repository import ledger_exists, add_notification, record_reminder_sent
from .schemas import ReminderJob
from .token_health import TokenHealthManager

logger = logging.getLogger(__name__)

_push_executor = ThreadPoolExecutor(max_workers=settings.PUSH_MAX_WORKERS, thread_name_prefix="push")


class DispatchOutcome(str, Enum):
    SENT = "sent"            # this worker recorded the slot
    DUPLICATE = "duplicate"  # slot was already in the ledger before processing
    CONFLICT = "conflict"    # a concurrent worker recorded the slot first


def deliver_with_timeout(
    adapter: PushDeliveryAdapter,
    job: ReminderJob,
    timeout: float,
    executor: ThreadPoolExecutor = _push_executor,
) -> List[PushOutcome]:
    """Run the adapter with a bounded wait. Failures are logged and yield no outcomes."""
    future = executor.submit(adapter.deliver, job.user_id, job.title, job.body, dict(job.data))
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        # Only drops a call still queued behind a busy pool; a running one keeps going
        future.cancel()
        push_dispatch_timeouts_total.inc()
        logger.warning(
            f"⏱️  [Worker] Push for fast={job.fast_id} user={job.user_id} exceeded {timeout}s; continuing without outcomes"
        )
        return []
    except Exception:
        logger.exception(f"❌ [Worker] Push adapter failed for fast={job.fast_id} user={job.user_id}")
        return []


class ReminderWorker:
    def __init__(
        self,
        db: Session,
        adapter: PushDeliveryAdapter,
        token_health: Optional[TokenHealthManager] = None,
        clock: Callable[[], datetime] = utc_now,
        push_timeout: Optional[float] = None,
    ):
        self.db = db
        self.adapter = adapter
        self.token_health = token_health or TokenHealthManager(settings.PERMANENT_TOKEN_ERROR_CODES)
        self.clock = clock
        self.push_timeout = push_timeout if push_timeout is not None else settings.PUSH_TIMEOUT_SECONDS

    def process(self, job: ReminderJob) -> DispatchOutcome:
        db = self.db
        try:
            if ledger_exists(db, job.fast_id, job.date_key, job.time_key):
                logger.info(
                    f"⏭️  [Worker] Reminder already sent | fast={job.fast_id} slot={job.date_key} {job.time_key}"
                )
                reminder_jobs_processed_total.labels(outcome=DispatchOutcome.DUPLICATE.value).inc()
                return DispatchOutcome.DUPLICATE

            notification = add_notification(db, job, settings.NOTIFICATION_TYPE)

            outcomes = deliver_with_timeout(self.adapter, job, self.push_timeout)
            now = self.clock()
            self.token_health.apply(db, job.user_id, outcomes, now)

            if record_reminder_sent(db, job, sent_at=now):
                outcome = DispatchOutcome.SENT
            else:
                # Another worker won the insert; its notification is the one that stands
                db.delete(notification)
                outcome = DispatchOutcome.CONFLICT
            db.commit()
        except Exception:
            db.rollback()
            raise

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(
            f"✅ [Worker] fast={job.fast_id} user={job.user_id} slot={job.date_key} {job.time_key} "
            f"outcome={outcome.value} tokens={len(outcomes)} failed={failed}"
        )
        reminder_jobs_processed_total.labels(outcome=outcome.value).inc()
        return outcome
