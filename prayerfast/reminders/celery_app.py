from celery import Celery
from kombu import Exchange, Queue
from .config import settings


broker_url = settings.CELERY_BROKER_URL or settings.RABBITMQ_URL
result_backend = settings.CELERY_RESULT_BACKEND or None

celery_app = Celery(
    "fasting",
    broker=broker_url,
    backend=result_backend,
)

exchange = Exchange(settings.RABBITMQ_EXCHANGE, type="direct", durable=True)

celery_app.conf.update(
    # At-least-once: ack after the task finishes, redeliver if the worker dies mid-task
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_ignore_result=result_backend is None,
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.WORKER_CONCURRENCY,
    # Enqueue returns only once the broker confirmed the persistent message
    broker_transport_options={"confirm_publish": True},
    task_publish_retry=True,
    task_default_delivery_mode="persistent",
    task_default_queue=settings.RABBITMQ_SCHEDULER_QUEUE,
    task_default_exchange=settings.RABBITMQ_EXCHANGE,
    task_default_routing_key=settings.RABBITMQ_SCHEDULER_ROUTING_KEY,
    include=["prayerfast.reminders.tasks"],
    task_queues=(
        Queue(settings.RABBITMQ_SCHEDULER_QUEUE, exchange=exchange, routing_key=settings.RABBITMQ_SCHEDULER_ROUTING_KEY, durable=True),
        Queue(settings.RABBITMQ_REMINDER_QUEUE, exchange=exchange, routing_key=settings.RABBITMQ_REMINDER_ROUTING_KEY, durable=True),
    ),
    task_routes={
        "fasting.send_prayer_reminder": {
            "queue": settings.RABBITMQ_REMINDER_QUEUE,
            "routing_key": settings.RABBITMQ_REMINDER_ROUTING_KEY,
        },
    },
)

# Celery Beat schedule. Ticks that wait in the broker past their minute expire
# instead of running late; a missed tick is never replayed.
celery_app.conf.beat_schedule = {
    "fasting-tick": {
        "task": "fasting.tick",
        "schedule": settings.TICK_INTERVAL_SECONDS,
        "options": {"expires": max(settings.TICK_INTERVAL_SECONDS - 5, 1)},
    },
    "cleanup-inactive-device-tokens": {
        "task": "devices.cleanup_inactive",
        "schedule": settings.TOKEN_CLEANUP_INTERVAL_SECONDS,
    },
}
