import time

from fastapi.testclient import TestClient

from daysheets.main import app


def test_health_is_always_ok():
    before = int(time.time() * 1000)
    res = TestClient(app).get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["status"] == "healthy"
    assert body["timestamp"] >= before
    assert res.headers["Cache-Control"] == "no-store"
