import pytest

from src.event_attendance.event_attendance.container import build_container
from src.event_attendance.event_attendance.core.exceptions import PersistenceFailure
from src.event_attendance.event_attendance.main import create_app

from conftest import MutableClock, RecordingDispatcher, RecordingNotifier


@pytest.fixture
def clock(fixed_now):
    return MutableClock(fixed_now)


@pytest.fixture
def container(catalog, clock):
    return build_container(
        store_backend="memory",
        catalog=catalog,
        dispatcher=RecordingDispatcher(),
        notifier=RecordingNotifier(),
        clock=clock,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container, start_scheduler=False)
    app.config["TESTING"] = True
    return app.test_client()


def _check_in(client, user_id="member-1", event_id="service-day", **extra):
    return client.post("/api/attendance/checkin", json={"user_id": user_id, "event_id": event_id, **extra})


def test_checkin_and_checkout_flow(client, clock):
    resp = _check_in(client)
    assert resp.status_code == 201
    record = resp.get_json()["record"]
    assert record["status"] == "CHECKED_IN"

    clock.advance(minutes=125)
    resp = client.post(
        f"/api/attendance/{record['record_id']}/checkout",
        json={"user_id": "member-1", "reflection": {"overall_rating": 5, "skills_learned": ["sorting"]}},
    )

    assert resp.status_code == 200
    closed = resp.get_json()["record"]
    assert closed["status"] == "VERIFIED"
    assert closed["duration_minutes"] == 125
    assert (closed["points_a"], closed["points_b"]) == (12, 6)
    assert closed["reflection"]["overall_rating"] == 5


def test_duplicate_checkin_is_conflict(client):
    _check_in(client)

    resp = _check_in(client, event_id="guest-talk")

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "DuplicateCheckIn"


def test_unknown_event_is_bad_request(client):
    assert _check_in(client, event_id="nope").status_code == 400


def test_bad_location_is_bad_request(client):
    assert _check_in(client, location={"latitude": "north"}).status_code == 400


def test_checkout_errors_map_to_status_codes(client):
    record_id = _check_in(client).get_json()["record"]["record_id"]

    assert client.post(f"/api/attendance/{record_id}/checkout", json={"user_id": "member-2"}).status_code == 403
    assert client.post("/api/attendance/missing/checkout", json={"user_id": "member-1"}).status_code == 404
    bad_rating = {"user_id": "member-1", "reflection": {"overall_rating": "great"}}
    assert client.post(f"/api/attendance/{record_id}/checkout", json=bad_rating).status_code == 400


def test_event_qr_code_round_trip(client):
    resp = client.get("/api/events/chapter-meeting/qr")
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")

    resp = client.post(
        "/api/attendance/checkin/qr",
        json={"user_id": "member-1", "qr_code": "EVENT-CHECKIN|chapter-meeting|BARN42"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["record"]["verification_method"] == "qr_code"


def test_qr_for_unknown_event_is_not_found(client):
    assert client.get("/api/events/nope/qr").status_code == 404


def test_garbled_qr_payload_is_bad_request(client):
    resp = client.post("/api/attendance/checkin/qr", json={"user_id": "member-1", "qr_code": "hello"})

    assert resp.status_code == 400


def test_history_streak_and_upcoming(client):
    _check_in(client)

    history = client.get("/api/attendance/history?user_id=member-1&status=CHECKED_IN")
    streak = client.get("/api/attendance/streak?user_id=member-1")
    upcoming = client.get("/api/attendance/upcoming?user_id=member-1&days=10")

    assert [r["event_id"] for r in history.get_json()["records"]] == ["service-day"]
    assert streak.get_json()["streak"]["current_streak"] == 0
    assert "county-show" in [e["event_id"] for e in upcoming.get_json()["events"]]


def test_history_rejects_bad_filters(client):
    assert client.get("/api/attendance/history?user_id=member-1&start=yesterday").status_code == 400
    assert client.get("/api/attendance/history?user_id=member-1&status=LOST").status_code == 400
    assert client.get("/api/attendance/history").status_code == 400
    assert client.get("/api/attendance/history?user_id=member-1&limit=-1").status_code == 400


def test_history_limit_zero_is_honoured(client):
    _check_in(client)

    response = client.get("/api/attendance/history?user_id=member-1&limit=0")

    assert response.status_code == 200
    assert response.get_json()["records"] == []


def test_non_text_verification_code_is_bad_request(client):
    response = _check_in(client, event_id="chapter-meeting", verification_code=42)

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"


def test_sweep_endpoint(client, clock):
    _check_in(client, event_id="guest-talk")
    clock.advance(hours=3)

    resp = client.post("/api/attendance/sweep", json={"cutoff_minutes": 60})

    assert resp.get_json() == {"success": True, "swept": 1}


def test_reminder_endpoints(client):
    record_id = _check_in(client).get_json()["record"]["record_id"]

    stats = client.get("/api/reminders/stats").get_json()
    assert stats["total_scheduled"] == 5

    resp = client.delete(f"/api/attendance/{record_id}/reminders?user_id=member-1")
    assert resp.get_json()["cancelled"] == 5

    resp = client.post(
        f"/api/attendance/{record_id}/reminders",
        json={"user_id": "member-1", "reminder_intervals": [20], "deadline_alert": False},
    )
    assert resp.status_code == 201
    assert [r["offset_minutes"] for r in resp.get_json()["reminders"]] == [20, 15]

    resp = client.post(f"/api/attendance/{record_id}/reminders/now", json={"user_id": "member-1"})
    assert resp.get_json()["success"] is True


def test_invalid_reminder_interval_is_bad_request(client):
    record_id = _check_in(client).get_json()["record"]["record_id"]

    resp = client.post(
        f"/api/attendance/{record_id}/reminders",
        json={"user_id": "member-1", "reminder_intervals": [0]},
    )

    assert resp.status_code == 400


def test_store_outage_is_service_unavailable(client, container, monkeypatch):
    def unavailable(record):
        raise PersistenceFailure("database is down")

    monkeypatch.setattr(container.attendance_repo, "create_checkin", unavailable)

    assert _check_in(client).status_code == 503
