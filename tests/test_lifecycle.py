from prayerfast.models import (
    FastingSession,
    FAST_STATUS_UPCOMING,
    FAST_STATUS_ACTIVE,
    FAST_STATUS_COMPLETED,
)
from prayerfast.reminders.lifecycle import FastLifecycleUpdater

from tests.conftest import minute, as_utc, hours


def _status(db, fast_id):
    db.expire_all()
    return db.get(FastingSession, fast_id)


def test_upcoming_session_inside_window_becomes_active_after_one_tick(db, make_fast):
    now = minute(14, 30)
    fast = make_fast(status=FAST_STATUS_UPCOMING, start_time=now - hours(1), end_time=now + hours(1))

    result = FastLifecycleUpdater().advance(db, now)

    assert result.activated == 1
    assert result.completed == 0
    row = _status(db, fast.id)
    assert row.status == FAST_STATUS_ACTIVE
    assert row.completed_at is None


def test_active_session_past_end_is_completed_with_completed_at(db, make_fast):
    now = minute(14, 30)
    fast = make_fast(status=FAST_STATUS_ACTIVE, start_time=now - hours(5), end_time=now)

    result = FastLifecycleUpdater().advance(db, now)

    assert result.completed == 1
    row = _status(db, fast.id)
    assert row.status == FAST_STATUS_COMPLETED
    assert as_utc(row.completed_at) == now


def test_future_sessions_are_left_alone(db, make_fast):
    now = minute(14, 30)
    fast = make_fast(status=FAST_STATUS_UPCOMING, start_time=now + hours(1), end_time=now + hours(2))

    result = FastLifecycleUpdater().advance(db, now)

    assert (result.activated, result.completed) == (0, 0)
    assert _status(db, fast.id).status == FAST_STATUS_UPCOMING


def test_window_entirely_in_the_past_completes_in_a_single_tick(db, make_fast):
    now = minute(14, 30)
    fast = make_fast(status=FAST_STATUS_UPCOMING, start_time=now - hours(3), end_time=now - hours(1))

    result = FastLifecycleUpdater().advance(db, now)

    assert (result.activated, result.completed) == (1, 1)
    assert _status(db, fast.id).status == FAST_STATUS_COMPLETED


def test_repeated_ticks_do_not_change_transitioned_rows(db, make_fast):
    now = minute(14, 30)
    ended = make_fast(status=FAST_STATUS_ACTIVE, start_time=now - hours(5), end_time=now - hours(1))
    updater = FastLifecycleUpdater()

    updater.advance(db, now)
    first_completed_at = as_utc(_status(db, ended.id).completed_at)

    later = now + hours(1)
    again = updater.advance(db, later)
    row = _status(db, ended.id)

    assert (again.activated, again.completed) == (0, 0)
    assert row.status == FAST_STATUS_COMPLETED
    assert as_utc(row.completed_at) == first_completed_at


def test_status_never_regresses(db, make_fast):
    now = minute(14, 30)
    # Completed session whose window (incorrectly) still looks open: no rule matches it
    fast = make_fast(status=FAST_STATUS_COMPLETED, start_time=now - hours(1), end_time=now + hours(1))

    FastLifecycleUpdater().advance(db, now)

    assert _status(db, fast.id).status == FAST_STATUS_COMPLETED
