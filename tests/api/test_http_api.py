from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest

from src.smart_attendance.smart_attendance.attendance.location import UNVERIFIED
from src.smart_attendance.smart_attendance.attendance.service import AttendanceGate, CheckInFlow
from src.smart_attendance.smart_attendance.common.bounded import BoundedCaller
from src.smart_attendance.smart_attendance.common.datetime_utils import now_utc
from src.smart_attendance.smart_attendance.core.enums import AttendanceStatus, PenaltyType
from src.smart_attendance.smart_attendance.events.service import EventService
from src.smart_attendance.smart_attendance.main import create_app
from src.smart_attendance.smart_attendance.members.model import Member
from src.smart_attendance.smart_attendance.penalties.service import PenaltyReportService
from src.smart_attendance.smart_attendance.sync.service import SyncReconciler

from fakes import (
    EVENT_LAT,
    EVENT_LON,
    T0,
    InMemoryEvents,
    InMemoryMembers,
    InMemoryStore,
    InMemoryWatermarks,
    make_event,
    make_record,
)


class SharedEvents(InMemoryEvents):
    """Event repository view over the store, like the MySQL pair sharing one table."""

    def __init__(self, store: InMemoryStore):
        super().__init__(store.events)


def _container(*, with_remote: bool = True):
    store = InMemoryStore()
    remote = InMemoryStore()
    caller = BoundedCaller(1.0)
    gate = AttendanceGate(store, caller=caller)
    return SimpleNamespace(
        local_store=store,
        members_repo=InMemoryMembers({"m-1": Member("m-1", "One"), "m-2": Member("m-2", "Two")}),
        remote_store=remote if with_remote else None,
        event_service=EventService(SharedEvents(store)),
        attendance_gate=gate,
        check_in_flow=CheckInFlow(gate, UNVERIFIED, caller=caller),
        penalty_report_service=PenaltyReportService(store),
        sync_reconciler=SyncReconciler(store, remote, InMemoryWatermarks()) if with_remote else None,
        location_caller=caller,
    )


@pytest.fixture()
def container(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    c = _container()
    yield c
    c.location_caller.close()


@pytest.fixture()
def client(container):
    return create_app(container).test_client()


def _live_event(container, **overrides):
    # Started a minute ago, so a check-in now is late by about a minute.
    event = make_event("ev-1", start=now_utc() - timedelta(minutes=1), **overrides)
    container.local_store.save_event(event)
    return event


def _check_in(member_id: str, **overrides) -> dict:
    payload = {"member_id": member_id, "latitude": EVENT_LAT, "longitude": EVENT_LON, "credential_verified": True}
    payload.update(overrides)
    return payload


def test_create_event(client, container):
    start = "2099-05-01T09:00:00Z"
    resp = client.post(
        "/api/events",
        json={
            "name": "Lab",
            "start_time": start,
            "end_time": "2099-05-01T11:00:00Z",
            "latitude": EVENT_LAT,
            "longitude": EVENT_LON,
            "geofence_radius": 75,
        },
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["geofence_radius"] == 75.0
    assert body["data"]["event_id"] in container.local_store.events


def test_create_event_with_bad_time_is_400(client):
    resp = client.post("/api/events", json={"name": "Lab", "start_time": "tomorrow", "end_time": "later"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION"


def test_update_and_deactivate_event(client, container):
    container.local_store.save_event(make_event("ev-1"))

    resp = client.patch("/api/events/ev-1", json={"geofence_radius": 120})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["geofence_radius"] == 120.0

    assert client.patch("/api/events/ev-1", json={"name": "x"}).status_code == 400
    assert client.patch("/api/events/nope", json={"geofence_radius": 1}).status_code == 404

    resp = client.post("/api/events/ev-1/deactivate")
    assert resp.get_json()["data"]["is_active"] is False


def test_classify_preview(client, container):
    event = make_event("ev-1")
    container.local_store.save_event(event)
    at = (event.start_time + timedelta(minutes=12)).isoformat()

    resp = client.get("/api/events/ev-1/classify", query_string={"at": at})

    assert resp.get_json()["data"] == {"status": "LATE", "penalty": "MINOR", "note": None}
    assert client.get("/api/events/nope/classify").status_code == 404


def test_mark_attendance_then_duplicate(client, container):
    _live_event(container)
    payload = _check_in("m-1", accuracy=8)

    first = client.post("/api/events/ev-1/attendance", json=payload)
    second = client.post("/api/events/ev-1/attendance", json=payload)

    assert first.status_code == 201
    assert first.get_json()["data"]["status"] == "LATE"
    assert second.status_code == 409
    assert second.get_json()["error"] == "ALREADY_MARKED"


def test_mark_attendance_error_codes(client, container):
    _live_event(container)

    far = client.post("/api/events/ev-1/attendance", json=_check_in("m-1", latitude=EVENT_LAT + 1))
    no_fix = client.post("/api/events/ev-1/attendance", json={"member_id": "m-1", "credential_verified": True})
    bad = client.post("/api/events/ev-1/attendance", json=_check_in("m-1", latitude="north"))
    missing = client.post("/api/events/nope/attendance", json=_check_in("m-1"))

    assert far.status_code == 422
    assert no_fix.status_code == 503
    assert bad.status_code == 400
    assert missing.status_code == 404


def test_member_penalties(client, container):
    _live_event(container)
    client.post("/api/events/ev-1/attendance", json=_check_in("m-1"))

    data = client.get("/api/members/m-1/penalties").get_json()["data"]

    assert data["total_points"] == 1
    assert data["risk_level"] == "LOW"
    assert data["breakdown"] == {"WARNING": 1}


def test_penalty_rules(client):
    rules = client.get("/api/penalties/rules").get_json()["data"]
    assert {r["penalty"] for r in rules} == {"WARNING", "MINOR", "MAJOR", "CRITICAL"}


def test_sync_endpoints(client, container):
    _live_event(container)
    client.post("/api/events/ev-1/attendance", json=_check_in("m-1"))

    resp = client.post("/api/sync")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["push"]["succeeded"] == 1
    assert client.post("/api/sync/push").get_json()["data"]["succeeded"] == 0
    assert client.post("/api/sync/pull").status_code == 200


def test_sync_without_remote_is_503(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    c = _container(with_remote=False)
    try:
        resp = create_app(c).test_client().post("/api/sync")
    finally:
        c.location_caller.close()
    assert resp.status_code == 503


def test_penalty_status_and_review(client, container):
    for i in range(5):
        container.local_store.upsert_record(
            make_record(f"r-{i}", member_id="m-2", event_id=f"ev-{i}",
                        status=AttendanceStatus.ABSENT, penalty=PenaltyType.CRITICAL)
        )

    status = client.get("/api/members/m-2/penalties/status").get_json()["data"]
    assert status["current_level"] == "CRITICAL"
    assert status["absent_count"] == 5
    assert status["escalate"] is True

    assert client.get("/api/penalties/review").get_json()["data"] == ["m-2"]


def test_check_in_without_a_credential_verdict_is_rejected(client, container):
    _live_event(container)
    payload = _check_in("m-1")
    del payload["credential_verified"]

    resp = client.post("/api/events/ev-1/attendance", json=payload)

    assert resp.status_code == 422
    assert resp.get_json()["error"] == "CREDENTIAL_REJECTED"
    assert container.local_store.records == {}


def test_check_in_with_failed_credential_is_rejected_with_reason(client, container):
    _live_event(container)
    payload = _check_in("m-1", credential_verified=False, credential_reason="Fingerprint not recognized")

    resp = client.post("/api/events/ev-1/attendance", json=payload)

    assert resp.status_code == 422
    assert resp.get_json()["message"] == "Fingerprint not recognized"
    assert container.local_store.records == {}


def test_check_in_with_non_boolean_verdict_is_400(client, container):
    _live_event(container)
    resp = client.post("/api/events/ev-1/attendance", json=_check_in("m-1", credential_verified="yes"))
    assert resp.status_code == 400


def test_list_active_events(client, container):
    container.local_store.save_event(make_event("ev-2", start=T0 + timedelta(days=1)))
    container.local_store.save_event(make_event("ev-1"))
    container.local_store.save_event(make_event("ev-old", is_active=False))

    data = client.get("/api/events").get_json()["data"]

    assert [e["event_id"] for e in data] == ["ev-1", "ev-2"]


def test_penalty_preview(client, container):
    container.local_store.upsert_record(make_record("r-1", member_id="m-1", penalty=PenaltyType.MAJOR))

    resp = client.get("/api/members/m-1/penalties/preview", query_string={"penalty": "critical"})
    current = client.get("/api/members/m-1/penalties/preview").get_json()["data"]

    assert resp.get_json()["data"] == {"penalty": "CRITICAL", "total_points": 23, "risk_level": "MEDIUM"}
    assert current == {"penalty": None, "total_points": 8, "risk_level": "LOW"}
    assert client.get("/api/members/m-1/penalties/preview?penalty=huge").status_code == 400
