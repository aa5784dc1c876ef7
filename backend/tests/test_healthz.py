from __future__ import annotations

from fastapi.testclient import TestClient

from setoran.main import app


def test_health_endpoint() -> None:
    response = TestClient(app).get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_database_health_endpoint_success(database) -> None:
    response = TestClient(app).get("/healthz/database")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["dialect"] == "sqlite"
    assert payload["pool"]["checkouts"] >= 1


def test_database_health_endpoint_failure(monkeypatch) -> None:
    def raise_runtime_error():
        raise RuntimeError("SETORAN_DATABASE_URL must be configured before using the database.")

    monkeypatch.setattr("setoran.main.get_engine", raise_runtime_error)
    response = TestClient(app).get("/healthz/database")
    assert response.status_code == 503
    assert "SETORAN_DATABASE_URL" in response.json()["detail"]
