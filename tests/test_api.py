from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from prayerfast.core.config import settings as core_settings
from prayerfast.db.session import get_db
from prayerfast.reminders.repository import record_reminder_sent
from prayerfast.reminders.schemas import ReminderJob
from prayerfast.reminders.config import settings as reminder_settings
from prayerfast.reminders.service import app, main

from tests.conftest import minute

API = core_settings.API_V1_STR


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_devices_for_user(client, make_token):
    make_token("tok-a", user_id=1)
    make_token("tok-b", user_id=2)

    response = client.get(f"{API}/devices", params={"user_id": 1})

    assert response.status_code == 200
    assert [d["token"] for d in response.json()] == ["tok-a"]


def test_deactivate_device(client, make_token):
    make_token("tok-a", user_id=1)

    response = client.post(f"{API}/devices/deactivate", json={"user_id": 1, "token": "tok-a"})

    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_deactivate_unknown_device_returns_404(client):
    response = client.post(f"{API}/devices/deactivate", json={"user_id": 1, "token": "missing"})

    assert response.status_code == 404


def test_cleanup_inactive_devices(client, make_token):
    make_token("old", user_id=1, is_active=False)
    make_token("live", user_id=1)

    response = client.delete(f"{API}/devices/inactive", params={"user_id": 1})

    assert response.status_code == 200
    assert response.json() == {"deleted": 1}


def test_list_fast_reminders(client, db, make_fast):
    make_fast(id=7, user_id=3)
    job = ReminderJob(
        fast_id=7, user_id=3, date_key="2024-01-01", time_key="14:30",
        title="Prayer Time Reminder", body="It's time to pray",
    )
    record_reminder_sent(db, job, sent_at=minute(14, 30))
    db.commit()

    response = client.get(f"{API}/fasts/7/reminders")

    assert response.status_code == 200
    [entry] = response.json()
    assert (entry["date_key"], entry["time_key"]) == ("2024-01-01", "14:30")


def test_api_key_enforced_when_required(client, monkeypatch):
    monkeypatch.setattr(core_settings, "REQUIRE_API_KEY", True)
    monkeypatch.setattr(core_settings, "VALID_API_KEYS", ["secret"])

    assert client.get(f"{API}/devices", params={"user_id": 1}).status_code == 401
    assert client.get(f"{API}/devices", params={"user_id": 1}, headers={"X-API-Key": "secret"}).status_code == 200


def test_main_serves_app_on_configured_host_and_port():
    with patch("prayerfast.reminders.service.uvicorn.run") as run:
        main()

    run.assert_called_once()
    assert run.call_args.args == (app,)
    assert run.call_args.kwargs["host"] == reminder_settings.SERVICE_HOST
    assert run.call_args.kwargs["port"] == reminder_settings.SERVICE_PORT
