from .fast import FastingSession, FAST_STATUS_UPCOMING, FAST_STATUS_ACTIVE, FAST_STATUS_COMPLETED
from .fast_reminder_log import FastReminderLog
from .device_token import DeviceToken
from .notification import Notification
