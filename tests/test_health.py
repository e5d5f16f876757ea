"""Tests for the /health endpoint."""

from __future__ import annotations

from fastapi.testclient import TestClient

from unifeed.feed.ledger import SeenLedger
from unifeed.ingestion.registry import AdapterRegistry
from unifeed.service import FeedService
from unifeed.storage.schema import init_db
from unifeed.web.app import create_app


def _client(db_path: str) -> TestClient:
    service = FeedService(AdapterRegistry(), SeenLedger(db_path), [])
    return TestClient(create_app(service, db_path), raise_server_exceptions=False)


class TestHealthEndpoint:
    def test_healthy_response(self, tmp_path):
        db_path = str(tmp_path / "test.db")
        init_db(db_path)

        resp = _client(db_path).get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "database": "ok"}

    def test_unhealthy_when_db_missing(self, tmp_path):
        db_path = str(tmp_path / "nonexistent" / "missing.db")

        resp = _client(db_path).get("/health")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "error"
        assert "detail" in data

    def test_unhealthy_when_schema_missing(self, tmp_path):
        db_path = str(tmp_path / "empty.db")

        assert _client(db_path).get("/health").status_code == 503

    def test_health_not_under_api_prefix(self, tmp_path):
        db_path = str(tmp_path / "test.db")
        init_db(db_path)
        client = _client(db_path)

        assert client.get("/health").status_code == 200
        assert client.get("/api/v1/health").status_code != 200
