import logging

from sqlalchemy.exc import OperationalError

from astrolog.api.deps import get_db
from astrolog.core.config import settings
from astrolog.core.logging_config import bind_request, get_log_buffer, unbind_request


class _UnreachableStore:
    def exec(self, *args, **kwargs):
        raise OperationalError("SELECT target.target_id", {}, Exception("connection refused"))


def test_health(anon_client):
    assert anon_client.get("/api/health").json() == {"status": "ok"}


def test_heartbeat_rejects_unknown_callers(anon_client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")

    response = anon_client.get("/api/heartbeat")
    assert response.status_code == 401
    assert response.text == "Unauthorized"

    wrong = anon_client.get("/api/heartbeat", headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401


def test_heartbeat_without_configured_secret_rejects_bearer(anon_client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "")
    response = anon_client.get("/api/heartbeat", headers={"Authorization": "Bearer "})
    assert response.status_code == 401


def test_heartbeat_accepts_bearer_secret(anon_client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")

    response = anon_client.get("/api/heartbeat", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["ts"].endswith("Z")


def test_heartbeat_accepts_scheduler_user_agent(anon_client):
    response = anon_client.get("/api/heartbeat", headers={"User-Agent": "vercel-cron/1.0"})
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_heartbeat_reports_unreachable_store(app, anon_client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    app.dependency_overrides[get_db] = lambda: _UnreachableStore()

    response = anon_client.get("/api/heartbeat", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 500
    assert response.text.startswith("Data store ping failed:")


def test_version_is_uncached(anon_client, monkeypatch):
    monkeypatch.setattr(settings, "build_tag", "2024.10.02-abc123")

    response = anon_client.get("/api/version")
    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert body["buildTag"] == "2024.10.02-abc123"
    assert body["now"].endswith("Z")


def test_version_falls_back_to_dev(anon_client, monkeypatch):
    monkeypatch.setattr(settings, "build_tag", "")
    assert anon_client.get("/api/version").json()["buildTag"] == "dev"


def test_recent_logs_are_exposed(client):
    client.post("/api/targets", json={"catalog_no": "M57"})

    logs = client.get("/api/logs", params={"limit": 50}).json()["logs"]
    assert any("M57" in entry["message"] for entry in logs)
    assert client.get("/api/logs", params={"limit": 500}).status_code == 422


def test_log_entries_carry_the_request_path(client):
    created = client.post("/api/targets", json={"catalog_no": "M97"})
    target_id = created.json()["target_id"]

    logs = client.get("/api/logs", params={"path": "/api/targets"}).json()["logs"]
    entry = next(e for e in logs if "M97" in e["message"])
    assert entry["method"] == "POST"
    assert entry["logger"] == "astrolog.services.targets"
    assert all(e["path"] == "/api/targets" for e in logs)

    client.delete(f"/api/targets/{target_id}")
    deleted = client.get("/api/logs", params={"path": f"/api/targets/{target_id}"}).json()["logs"]
    assert deleted[0]["method"] == "DELETE"


def test_records_outside_a_request_have_no_path():
    logging.getLogger("astrolog.tests").warning("outside any request")
    entry = get_log_buffer(limit=1)[0]
    assert entry["message"] == "outside any request"
    assert entry["path"] == ""

    token = bind_request("GET", "/api/version")
    try:
        logging.getLogger("astrolog.tests").warning("inside a request")
    finally:
        unbind_request(token)
    assert get_log_buffer(limit=1)[0]["path"] == "/api/version"
