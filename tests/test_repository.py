from datetime import timedelta

from sqlalchemy import func, select

from prayerfast.models import DeviceToken, FastReminderLog
from prayerfast.reminders.repository import (
    ledger_exists,
    record_reminder_sent,
    list_reminder_logs,
    list_active_tokens,
    cleanup_inactive_tokens,
)
from prayerfast.reminders.schemas import ReminderJob

from tests.conftest import minute


def _job(fast_id=7, date_key="2024-01-01", time_key="14:30"):
    return ReminderJob(
        fast_id=fast_id, user_id=3, date_key=date_key, time_key=time_key,
        title="Prayer Time Reminder", body="It's time to pray", data={},
    )


def test_ledger_insert_reports_conflict_instead_of_raising(db, make_fast):
    make_fast(id=7)

    assert record_reminder_sent(db, _job(), sent_at=minute(14, 30)) is True
    db.commit()
    assert record_reminder_sent(db, _job(), sent_at=minute(14, 31)) is False
    db.commit()

    assert db.execute(select(func.count()).select_from(FastReminderLog)).scalar_one() == 1
    assert ledger_exists(db, 7, "2024-01-01", "14:30")
    assert not ledger_exists(db, 7, "2024-01-01", "14:31")


def test_ledger_entries_listed_newest_first(db, make_fast):
    make_fast(id=7)
    for date_key, time_key in [("2024-01-01", "05:00"), ("2024-01-02", "05:00"), ("2024-01-01", "20:00")]:
        record_reminder_sent(db, _job(date_key=date_key, time_key=time_key), sent_at=minute(5, 0))
    db.commit()

    logs = list_reminder_logs(db, fast_id=7)

    assert [(entry.date_key, entry.time_key) for entry in logs] == [
        ("2024-01-02", "05:00"), ("2024-01-01", "20:00"), ("2024-01-01", "05:00"),
    ]


def test_only_active_tokens_are_used_for_fan_out(db, make_token):
    make_token("on", user_id=1)
    make_token("off", user_id=1, is_active=False)
    make_token("other", user_id=2)

    assert list_active_tokens(db, 1) == ["on"]


def test_cleanup_deletes_only_old_inactive_tokens(db, make_token):
    make_token("active-old")
    make_token("inactive-old", is_active=False)
    recent = make_token("inactive-recent", is_active=False)
    recent.updated_at = minute(12, 0, day=20)
    db.commit()

    deleted = cleanup_inactive_tokens(db, older_than=minute(0, 0, day=10))

    remaining = set(db.execute(select(DeviceToken.token)).scalars())
    assert deleted == 1
    assert remaining == {"active-old", "inactive-recent"}


def test_cleanup_can_be_scoped_to_one_user(db, make_token):
    make_token("mine", user_id=1, is_active=False)
    make_token("theirs", user_id=2, is_active=False)

    deleted = cleanup_inactive_tokens(db, older_than=minute(0, 0) + timedelta(days=30), user_id=1)

    assert deleted == 1
    assert set(db.execute(select(DeviceToken.token)).scalars()) == {"theirs"}


def test_model_timestamp_defaults_are_timezone_aware(db):
    token = DeviceToken(user_id=1, platform="android", token="fresh")
    db.add(token)
    db.flush()

    assert token.created_at.tzinfo is not None
    assert token.updated_at.tzinfo is not None
