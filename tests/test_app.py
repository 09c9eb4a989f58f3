from fastapi import APIRouter

from app.main import app as fastapi_app
from app.worker.scheduler import make_scheduler


def test_healthz(client):
    resp = client.get("/api/healthz")
    assert resp.status_code == 200
    assert resp.json()["service"] == "fleet_portal"


def test_readyz(client):
    resp = client.get("/api/readyz")
    assert resp.status_code == 200
    assert resp.json()["db"] == "up"


def test_request_id_header_is_echoed(client):
    resp = client.get("/api/healthz", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"


def test_unhandled_error_returns_message_and_stack(client, monkeypatch):
    router = APIRouter()

    @router.get("/api/v1/_boom")
    def boom():
        raise RuntimeError("kaput")

    fastapi_app.include_router(router)
    monkeypatch.setenv("ERROR_INCLUDE_STACK", "1")

    resp = client.get("/api/v1/_boom")
    body = resp.json()
    assert resp.status_code == 500
    assert body["error"] == "kaput"
    assert "RuntimeError" in body["stack"]
    assert body["trace_id"]


def test_scheduler_jobs(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Australia/Sydney")
    monkeypatch.setenv("APP_SCHEDULER_HOUR", "7")
    sched = make_scheduler()
    jobs = {job.id for job in sched.get_jobs()}
    assert jobs == {"daily_notifications", "weekly_reports", "monthly_reports"}
