from datetime import date, timedelta
import importlib
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

TODAY = date(2025, 2, 10)


# We import the server AFTER monkeypatching env so the store comes from config
def make_app(monkeypatch, api_token=None):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.delenv("DEMO_USER_ID", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    if api_token is not None:
        monkeypatch.setenv("API_TOKEN", api_token)
    else:
        monkeypatch.delenv("API_TOKEN", raising=False)

    server_main = importlib.import_module("server.main")
    importlib.reload(server_main)
    return server_main.app


def log_payload(offset=0, **overrides):
    data = {
        "user_id": "u1",
        "date": (TODAY - timedelta(days=offset)).isoformat(),
        "flow_level": "none",
        "pain_scale": 2,
        "mood": "calm",
        "energy_level": 7,
        "sleep_hours": 8,
    }
    data.update(overrides)
    return data


@pytest.fixture
def client(monkeypatch):
    return TestClient(make_app(monkeypatch))


@pytest.fixture
def client_with_auth(monkeypatch):
    return TestClient(make_app(monkeypatch, api_token="secrettoken"))


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_store_comes_from_config(monkeypatch):
    from db import InMemoryStore

    app = make_app(monkeypatch)
    assert isinstance(app.state.store, InMemoryStore)


def test_auth_enabled_blocks_without_header(client_with_auth):
    r = client_with_auth.get("/logs", params={"user_id": "u1"})
    assert r.status_code == 401


def test_auth_enabled_allows_with_header(client_with_auth):
    r = client_with_auth.get(
        "/logs", params={"user_id": "u1"}, headers={"Authorization": "Bearer secrettoken"}
    )
    assert r.status_code == 200


def test_auth_rejects_wrong_token(client_with_auth):
    r = client_with_auth.get(
        "/logs", params={"user_id": "u1"}, headers={"Authorization": "Bearer nope"}
    )
    assert r.status_code == 401


def test_post_log_returns_stored_entry(client):
    r = client.post("/logs", json=log_payload(mood="Worried", flow_level="spotting"))
    assert r.status_code == 201
    body = r.json()
    assert body["id"]
    assert body["mood"] == "anxious"
    assert body["flow_level"] == "light"
    assert body["date"] == TODAY.isoformat()


def test_post_log_reduces_timestamp_to_day(client):
    r = client.post("/logs", json=log_payload(date="2025-02-10T08:30:00Z"))
    assert r.status_code == 201
    assert r.json()["date"] == "2025-02-10"


@pytest.mark.parametrize(
    "overrides",
    [{"date": "banana"}, {"pain_scale": 11}, {"energy_level": 0}, {"mood": "ecstatic"}, {"flow_level": "gushing"}],
)
def test_post_log_validation(client, overrides):
    r = client.post("/logs", json=log_payload(**overrides))
    assert r.status_code == 422


def test_list_logs_newest_first(client):
    for offset in (2, 0, 1):
        client.post("/logs", json=log_payload(offset))
    r = client.get("/logs", params={"user_id": "u1", "limit": 2})
    assert r.status_code == 200
    assert [e["date"] for e in r.json()] == [TODAY.isoformat(), (TODAY - timedelta(days=1)).isoformat()]


def test_logs_in_range(client):
    for offset in range(5):
        client.post("/logs", json=log_payload(offset))
    r = client.get(
        "/logs/range",
        params={
            "user_id": "u1",
            "start": (TODAY - timedelta(days=3)).isoformat(),
            "end": (TODAY - timedelta(days=1)).isoformat(),
        },
    )
    assert r.status_code == 200
    assert len(r.json()) == 3


def test_logs_in_range_bad_date(client):
    r = client.get("/logs/range", params={"user_id": "u1", "start": "banana", "end": "2025-01-01"})
    assert r.status_code == 400


def test_edit_and_delete_log(client):
    log_id = client.post("/logs", json=log_payload()).json()["id"]

    r = client.patch(f"/logs/{log_id}", json={"pain_scale": 9, "notes": "worse"})
    assert r.status_code == 200
    body = r.json()
    assert body["pain_scale"] == 9
    assert body["notes"] == "worse"
    assert body["mood"] == "calm"
    assert body["updated_at"] is not None

    assert client.delete(f"/logs/{log_id}").status_code == 204
    assert client.delete(f"/logs/{log_id}").status_code == 404
    assert client.patch(f"/logs/{log_id}", json={"pain_scale": 1}).status_code == 404


@pytest.mark.parametrize("field", ["mood", "date", "flow_level", "pain_scale", "energy_level", "sleep_hours"])
def test_edit_rejects_null_for_required_field(client, field):
    log_id = client.post("/logs", json=log_payload()).json()["id"]

    r = client.patch(f"/logs/{log_id}", json={field: None})
    assert r.status_code == 422

    stored = client.get("/logs", params={"user_id": "u1"}).json()[0]
    assert stored["mood"] == "calm"
    assert stored["updated_at"] is None


def test_edit_can_clear_notes(client):
    log_id = client.post("/logs", json=log_payload(notes="cramps")).json()["id"]
    r = client.patch(f"/logs/{log_id}", json={"notes": None})
    assert r.status_code == 200
    assert r.json()["notes"] is None


def test_profile_defaults_and_update(client):
    r = client.get("/profile/u1")
    assert r.json() == {"user_id": "u1", "last_period_start": None, "average_cycle_length": 28}

    r = client.put("/profile/u1", json={"last_period_start": "2025-01-01", "average_cycle_length": 30})
    assert r.status_code == 200
    assert r.json()["last_period_start"] == "2025-01-01"

    r = client.put("/profile/u1", json={"average_cycle_length": 0})
    assert r.status_code == 422


def test_cycle_prediction(client):
    assert client.get("/cycle", params={"user_id": "u1"}).json() == {"cycle": None}

    client.put("/profile/u1", json={"last_period_start": "2025-01-01"})
    r = client.get("/cycle", params={"user_id": "u1", "today": "2025-01-11"})
    assert r.status_code == 200
    assert r.json() == {
        "cycle": {"current_day": 11, "days_until": 18, "next_period": "2025-01-29"}
    }


def test_cycle_bad_today(client):
    r = client.get("/cycle", params={"user_id": "u1", "today": "banana"})
    assert r.status_code == 400


def test_streak(client):
    for offset in (0, 1, 3):
        client.post("/logs", json=log_payload(offset))
    r = client.get("/streak", params={"user_id": "u1", "today": TODAY.isoformat()})
    assert r.json() == {"streak": 2}


def test_risk(client):
    assert client.get("/risk", params={"user_id": "u1"}).json()["level"] == "low"

    for offset in range(3):
        client.post("/logs", json=log_payload(offset, flow_level="heavy"))
    body = client.get("/risk", params={"user_id": "u1"}).json()
    assert body["level"] == "high"
    assert body["flags"][-1].startswith("Prolonged heavy bleeding")
    assert body["disclaimer"]


def test_dashboard(client):
    client.post("/logs", json=log_payload(1))
    client.post("/logs", json=log_payload(0, notes="latest"))
    client.put("/profile/u1", json={"last_period_start": TODAY.isoformat()})

    body = client.get("/dashboard", params={"user_id": "u1", "today": TODAY.isoformat()}).json()
    assert body["streak"] == 2
    assert body["risk"]["level"] == "low"
    assert body["cycle"]["current_day"] == 1
    assert body["latest_log"]["notes"] == "latest"


def test_report_without_logs_is_400(client):
    r = client.post("/reports", json={"user_id": "u1"})
    assert r.status_code == 400
    assert "No symptom logs" in r.json()["detail"]


def test_generate_and_fetch_report(client):
    for offset in range(4):
        client.post("/logs", json=log_payload(offset, pain_scale=8, mood="sad"))

    r = client.post("/reports", json={"user_id": "u1"})
    assert r.status_code == 201
    body = r.json()
    report = body["report"]
    assert report["risks"]["level"] == "medium"
    assert len(report["risks"]["flags"]) == 2
    assert report["symptoms"]["average_pain"] == 8.0
    assert report["symptoms"]["common_moods"] == ["sad"]
    assert report["cycle_data"] == {"average_length": 28, "period_days": 0}
    assert "Risk Level: MEDIUM" in body["document"]

    listed = client.get("/reports", params={"user_id": "u1"}).json()
    assert [r["id"] for r in listed] == [report["id"]]

    fetched = client.get(f"/reports/{report['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == report


def test_missing_report_is_404(client):
    assert client.get("/reports/does-not-exist").status_code == 404
