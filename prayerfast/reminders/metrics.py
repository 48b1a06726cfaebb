from prometheus_client import Counter


scheduler_ticks_total = Counter(
    "fasting_scheduler_ticks_total",
    "Total scheduler ticks that completed",
)

scheduler_tick_failures_total = Counter(
    "fasting_scheduler_tick_failures_total",
    "Total scheduler ticks aborted by an error",
)

lifecycle_transitions_total = Counter(
    "fasting_lifecycle_transitions_total",
    "Total fasting session status transitions",
    ["to_status"],
)

reminder_candidates_enqueued_total = Counter(
    "fasting_reminder_candidates_enqueued_total",
    "Total reminder jobs enqueued by the scheduler",
)

reminder_jobs_processed_total = Counter(
    "fasting_reminder_jobs_processed_total",
    "Total reminder jobs processed by workers, by outcome",
    ["outcome"],
)

push_dispatch_success_total = Counter(
    "fasting_push_dispatch_success_total",
    "Total per-token push deliveries that succeeded",
)

push_dispatch_failed_total = Counter(
    "fasting_push_dispatch_failed_total",
    "Total per-token push deliveries that failed",
)

push_dispatch_timeouts_total = Counter(
    "fasting_push_dispatch_timeouts_total",
    "Total push deliveries abandoned after the timeout",
)

device_tokens_deactivated_total = Counter(
    "fasting_device_tokens_deactivated_total",
    "Total device tokens deactivated after a permanent push error",
)
