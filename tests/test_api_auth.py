from datetime import datetime

from fastapi.testclient import TestClient

from engine_fakes import FakeOrchestrator, ScriptedEngine
from movegrade.AnalysisScheduler import AnalysisScheduler
from movegrade.Analyzer import Analyzer
from movegrade.api import build_app
from movegrade.ApiContext import ApiContext
from movegrade.config import Settings
from movegrade.db.duckdb_store import open_store

TOKEN = "test-token"


def _client() -> TestClient:
    settings = Settings(api_token=TOKEN, tracked_players=[])
    store = open_store(":memory:")
    analyzer = Analyzer.from_store(store, settings=settings)
    scheduler = AnalysisScheduler(store.games, analyzer, FakeOrchestrator(ScriptedEngine()))
    return TestClient(build_app(ApiContext(settings=settings, store=store, scheduler=scheduler)))


# API auth tests


def test_health_is_unauthenticated():
    response = _client().get("/api/health")
    assert response.status_code == 200


def test_health_returns_schema() -> None:
    response = _client().get("/api/health", headers={"Authorization": f"Bearer {TOKEN}"})
    assert response.status_code == 200
    payload = response.json()
    assert set(payload.keys()) == {"status", "service", "version", "timestamp"}
    assert payload["status"] == "ok"
    assert payload["service"] == "movegrade"
    assert isinstance(payload["version"], str)
    datetime.fromisoformat(payload["timestamp"])


def test_requires_auth_for_queue():
    client = _client()
    assert client.get("/api/queue").status_code == 401
    assert client.post("/api/analysis/stop").status_code == 401


def test_rejects_wrong_token():
    response = _client().get("/api/queue", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_allows_authorization_header():
    response = _client().get("/api/queue", headers={"Authorization": f"Bearer {TOKEN}"})
    assert response.status_code == 200


def test_allows_api_key_header():
    response = _client().get("/api/review-positions/due", headers={"X-API-Key": TOKEN})
    assert response.status_code == 200
