"""
Reminder candidate selection: (active sessions, tick time) -> reminder jobs
"""
import re
from datetime import datetime
from typing import Iterable, List, Optional

from prayerfast.models import FastingSession
from prayerfast.utils.timezone import slot_keys
from .config import settings
from .schemas import ReminderJob


PRAYER_TIME_PATTERN = re.compile(r"\d{2}:\d{2}", re.ASCII)


def reminder_body(prayer_focus: Optional[str]) -> str:
    if prayer_focus:
        return f"It's time to pray: {prayer_focus}"
    return "It's time to pray"


def candidates_for_session(session: FastingSession, now: datetime) -> List[ReminderJob]:
    """One job per ``prayer_times`` entry equal to the tick's minute.

    Entries that are not zero-padded "HH:MM" strings are ignored. Duplicate
    entries yield duplicate jobs; the ledger absorbs them downstream.
    """
    date_key, time_key = slot_keys(now)
    prayer_times = session.prayer_times if isinstance(session.prayer_times, list) else []
    jobs: List[ReminderJob] = []
    for entry in prayer_times:
        if not isinstance(entry, str) or not PRAYER_TIME_PATTERN.fullmatch(entry):
            continue
        if entry != time_key:
            continue
        jobs.append(
            ReminderJob(
                fast_id=session.id,
                user_id=session.user_id,
                date_key=date_key,
                time_key=time_key,
                title=settings.NOTIFICATION_TITLE,
                body=reminder_body(session.prayer_focus),
                data={"purpose": "fast_prayer", "fastId": str(session.id), "timeKey": time_key},
            )
        )
    return jobs


def select_reminder_candidates(sessions: Iterable[FastingSession], now: datetime) -> List[ReminderJob]:
    jobs: List[ReminderJob] = []
    for session in sessions:
        jobs.extend(candidates_for_session(session, now))
    return jobs
