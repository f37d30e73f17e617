from __future__ import annotations

from fastapi.testclient import TestClient

from duoqueen.config import Config
from duoqueen.protocol.http.app import create_app


def test_healthz_ok() -> None:
    client = TestClient(create_app(Config()))
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_request_id_is_echoed() -> None:
    client = TestClient(create_app(Config()))
    r = client.get("/healthz", headers={"x-request-id": "abc123"})
    assert r.headers["x-request-id"] == "abc123"
    r2 = client.get("/healthz")
    assert r2.headers["x-request-id"]
