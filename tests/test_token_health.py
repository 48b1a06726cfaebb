from firebase_admin import exceptions as firebase_exceptions
from sqlalchemy import select

from prayerfast.models import DeviceToken
from prayerfast.reminders.config import settings
from prayerfast.reminders.dispatcher import PushOutcome, fcm_error_code
from prayerfast.reminders.token_health import TokenHealthManager

from tests.conftest import minute, as_utc

PERMANENT = [
    "messaging/registration-token-not-registered",
    "messaging/invalid-registration-token",
]


def _tokens(db):
    db.expire_all()
    return {t.token: t for t in db.execute(select(DeviceToken)).scalars()}


def test_permanent_error_deactivates_token_and_leaves_others(db, make_token):
    make_token("gone", user_id=1)
    make_token("fine", user_id=1)
    make_token("gone", user_id=2)  # same token string registered by another user
    now = minute(14, 30)

    deactivated = TokenHealthManager(PERMANENT).apply(db, 1, [
        PushOutcome("gone", False, "messaging/registration-token-not-registered"),
        PushOutcome("fine", True),
    ], now)
    db.commit()

    assert deactivated == 1
    rows = db.execute(select(DeviceToken.user_id, DeviceToken.token, DeviceToken.is_active)).all()
    states = {(r.user_id, r.token): r.is_active for r in rows}
    assert states == {(1, "gone"): False, (1, "fine"): True, (2, "gone"): True}
    assert as_utc(_tokens(db)["fine"].last_active_at) == now


def test_transient_error_keeps_token_active(db, make_token):
    make_token("flaky")

    deactivated = TokenHealthManager(PERMANENT).apply(db, 1, [
        PushOutcome("flaky", False, "messaging/unavailable"),
    ], minute(14, 30))
    db.commit()

    assert deactivated == 0
    assert _tokens(db)["flaky"].is_active is True


def test_codes_match_with_or_without_the_messaging_prefix():
    manager = TokenHealthManager(["registration-token-not-registered"])

    assert manager.is_permanent("messaging/registration-token-not-registered")
    assert manager.is_permanent("REGISTRATION-TOKEN-NOT-REGISTERED")
    assert not manager.is_permanent("messaging/invalid-argument")
    assert not manager.is_permanent(None)


def test_deactivation_is_never_undone_by_later_success(db, make_token):
    make_token("gone")
    manager = TokenHealthManager(PERMANENT)

    manager.apply(db, 1, [PushOutcome("gone", False, "messaging/invalid-registration-token")], minute(14, 30))
    db.commit()
    again = manager.apply(db, 1, [PushOutcome("gone", True)], minute(14, 31))
    db.commit()

    token = _tokens(db)["gone"]
    assert again == 0
    assert token.is_active is False
    assert token.last_active_at is None


def test_error_code_set_comes_from_configuration(db, make_token):
    make_token("quota")
    manager = TokenHealthManager(["messaging/quota-exceeded"])

    deactivated = manager.apply(db, 1, [PushOutcome("quota", False, "messaging/quota-exceeded")], minute(14, 30))

    assert deactivated == 1


def test_malformed_token_reported_by_fcm_is_deactivated_with_default_codes(db, make_token):
    make_token("garbled")
    code = fcm_error_code(
        firebase_exceptions.InvalidArgumentError("The registration token is not a valid FCM registration token")
    )

    deactivated = TokenHealthManager(settings.PERMANENT_TOKEN_ERROR_CODES).apply(
        db, 1, [PushOutcome("garbled", False, code)], minute(14, 30)
    )
    db.commit()

    assert deactivated == 1
    assert _tokens(db)["garbled"].is_active is False
