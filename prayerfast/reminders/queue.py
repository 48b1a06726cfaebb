import logging

from .celery_app import celery_app
from .config import settings
from .schemas import ReminderJob

logger = logging.getLogger(__name__)

SEND_PRAYER_REMINDER = "fasting.send_prayer_reminder"

# Retry policy for publishing; consumer-side retries are configured on the task
PUBLISH_RETRY_POLICY = {
    "max_retries": 3,
    "interval_start": 0,
    "interval_step": 0.5,
    "interval_max": 2,
}


class FastingQueue:
    """Producer side of the durable reminder queue."""

    @staticmethod
    def enqueue_prayer_reminder(job: ReminderJob) -> None:
        celery_app.send_task(
            SEND_PRAYER_REMINDER,
            args=[job.to_message()],
            queue=settings.RABBITMQ_REMINDER_QUEUE,
            routing_key=settings.RABBITMQ_REMINDER_ROUTING_KEY,
            retry=True,
            retry_policy=PUBLISH_RETRY_POLICY,
        )
        logger.debug(
            "📨 [Queue] Enqueued prayer reminder fast=%s slot=%s %s",
            job.fast_id, job.date_key, job.time_key,
        )
