from datetime import datetime, timezone as dt_timezone
from typing import Tuple


def utc_now() -> datetime:
    return datetime.now(dt_timezone.utc)


def to_utc_aware(dt: datetime | None) -> datetime | None:
    """
    Normalize any datetime to UTC-aware (tzinfo=UTC).
    - Aware datetimes are converted to UTC
    - Naive datetimes are assumed UTC and tz attached
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def slot_keys(now: datetime) -> Tuple[str, str]:
    """Return the (date_key, time_key) pair identifying the UTC minute of ``now``."""
    utc = to_utc_aware(now)
    return utc.strftime("%Y-%m-%d"), utc.strftime("%H:%M")
