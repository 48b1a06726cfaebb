from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import prayerfast.models  # noqa: F401
from prayerfast.db.base import Base
from prayerfast.models import FastingSession, DeviceToken, FAST_STATUS_ACTIVE
from prayerfast.reminders.dispatcher import PushOutcome


UTC = dt_timezone.utc


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'reminders.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_fast(db):
    def _make_fast(
        id=None,
        user_id=1,
        status=FAST_STATUS_ACTIVE,
        start_time=datetime(2024, 1, 1, 0, 0, tzinfo=UTC),
        end_time=datetime(2024, 1, 2, 0, 0, tzinfo=UTC),
        prayer_times=None,
        reminder_enabled=True,
        prayer_focus=None,
    ) -> FastingSession:
        fast = FastingSession(
            id=id,
            user_id=user_id,
            status=status,
            start_time=start_time,
            end_time=end_time,
            prayer_times=prayer_times if prayer_times is not None else [],
            reminder_enabled=reminder_enabled,
            prayer_focus=prayer_focus,
        )
        db.add(fast)
        db.commit()
        db.refresh(fast)
        return fast

    return _make_fast


@pytest.fixture
def make_token(db):
    def _make_token(token, user_id=1, platform="ios", is_active=True) -> DeviceToken:
        row = DeviceToken(
            user_id=user_id,
            token=token,
            platform=platform,
            is_active=is_active,
            updated_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make_token


class FakePushAdapter:
    """Records deliveries and answers with canned per-token outcomes."""

    def __init__(self, outcomes: List[PushOutcome] = None):
        self.outcomes = outcomes or []
        self.calls: List[Dict] = []

    def deliver(self, user_id, title, body, data):
        self.calls.append({"user_id": user_id, "title": title, "body": body, "data": data})
        return list(self.outcomes)


@pytest.fixture
def push_adapter():
    return FakePushAdapter()


def minute(hour, minute_, second=0, day=1):
    return datetime(2024, 1, day, hour, minute_, second, tzinfo=UTC)


def as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def hours(n) -> timedelta:
    return timedelta(hours=n)
