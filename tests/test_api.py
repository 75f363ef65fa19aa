"""Tests for the HTTP surface."""
from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from conftest import FakeExecutor
from api import create_app
from collectors import get_collector
from errors import DataSourceError, ScrapeBusyError
from orchestrator import CollectionOrchestrator


def _client(responses=None, default=None) -> tuple[TestClient, FakeExecutor]:
    executor = FakeExecutor(responses, default=default)
    orch = CollectionOrchestrator(executor)
    return TestClient(create_app(orch)), executor


def test_metrics_endpoint_serves_exposition() -> None:
    client, _ = _client({
        get_collector("mssql_up").query: [[1]],
        get_collector("mssql_database_state").query: [["dbA", "ONLINE_STATE_0"], ["dbB", "3"]],
    }, default=[])
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    body = resp.text
    assert "mssql_up 1.0" in body
    assert 'mssql_database_state{database="dbB"} 3.0' in body
    assert 'database="dbA"' not in body


def test_metrics_endpoint_survives_collector_failures() -> None:
    client, _ = _client(default=DataSourceError("down"))
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "# HELP mssql_up UP Status" in resp.text


def test_metrics_busy_returns_503() -> None:
    client, _ = _client(default=[])
    orch = client.app.state.orchestrator

    def busy():
        raise ScrapeBusyError("busy")

    orch.collect = busy
    assert client.get("/metrics").status_code == 503


def test_collectors_report() -> None:
    client, _ = _client({get_collector("mssql_up").query: DataSourceError("down")}, default=[])
    assert client.get("/collectors").json()["last_report"] is None
    client.get("/metrics")
    data = client.get("/collectors").json()
    assert data["collectors"][0] == "mssql_up"
    assert data["last_report"]["failed"] == 1
    assert data["last_report"]["results"][0]["collector_id"] == "mssql_up"


def test_health_and_index() -> None:
    client, _ = _client(default=[])
    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["state"] == "idle"
    assert "/metrics" in client.get("/").text
