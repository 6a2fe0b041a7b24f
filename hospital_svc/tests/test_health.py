"""
Tests for health, readiness, and metrics endpoints.

These tests verify the observability endpoints work correctly:
- /health: Liveness probe
- /ready: Readiness probe (database schema, permission registry)
- /metrics: Prometheus-format metrics
- /: Root endpoint with API info
"""
import json
import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.logging_config import JSONFormatter, bind_caller, clear_request_context, set_request_id
from core.middleware import (
    LoggingMiddleware,
    MetricsCollector,
    RequestMetrics,
    get_metrics_collector,
    request_id_from,
    resource_for_path,
)


def _request(path: str, status_code: int, duration_ms: float = 5.0, role=None) -> RequestMetrics:
    return RequestMetrics(
        timestamp=datetime.now(timezone.utc),
        method="GET",
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        request_id="abc12345",
        role=role,
    )


# =============================================================================
# ROOT / HEALTH / READY
# =============================================================================

def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "Hospital Service API"
    assert data["version"] == "1.0.0"
    assert data["ready"] == "/ready"
    assert data["metrics"] == "/metrics"


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


def test_ready_endpoint_checks_database(client):
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert [d["name"] for d in data["dependencies"]] == ["database", "permissions"]
    assert all(d["status"] == "ok" for d in data["dependencies"])


def test_ready_reports_missing_tables(client, temp_db):
    conn = temp_db.get_connection()
    try:
        conn.execute("DROP TABLE notifications")
        conn.commit()
    finally:
        conn.close()

    response = client.get("/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    database = data["dependencies"][0]
    assert database["status"] == "unavailable"
    assert "notifications" in database["message"]


# =============================================================================
# METRICS ENDPOINTS
# =============================================================================

def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers.get("content-type", "")
    content = response.text
    assert "http_requests_total" in content
    assert "http_request_duration_ms" in content
    assert 'auth_rejections_total{reason="forbidden"}' in content


def test_metrics_json_endpoint(client):
    response = client.get("/metrics/json")
    assert response.status_code == 200
    data = response.json()
    assert "http_requests_total" in data
    assert "auth_rejections_401_total" in data
    assert isinstance(data["http_requests_by_resource"], dict)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class TestMetricsCollector:

    def test_counts_status_classes_and_auth_rejections(self):
        collector = MetricsCollector()
        collector.record_request(_request("/api/v1/lab-tests", 200))
        collector.record_request(_request("/api/v1/lab-tests", 401))
        collector.record_request(_request("/api/v1/users", 403))
        collector.record_request(_request("/api/v1/users", 404))
        collector.record_request(_request("/api/v1/users", 500))

        summary = collector.get_summary()
        assert summary["http_requests_total"] == 5
        assert summary["http_requests_2xx_total"] == 1
        assert summary["http_requests_4xx_total"] == 3
        assert summary["http_requests_5xx_total"] == 1
        assert summary["auth_rejections_401_total"] == 1
        assert summary["auth_rejections_403_total"] == 1
        assert summary["http_requests_by_resource"] == {"lab-tests": 2, "users": 3}

    def test_latency_percentiles_empty(self):
        assert MetricsCollector().get_latency_percentiles() == {"p50": 0, "p95": 0, "p99": 0}

    def test_latency_percentiles(self):
        collector = MetricsCollector()
        for ms in range(1, 101):
            collector.record_request(_request("/health", 200, duration_ms=float(ms)))
        latencies = collector.get_latency_percentiles()
        assert latencies["p50"] == 51.0
        assert latencies["p99"] == 100.0

    def test_prometheus_format_lists_resources(self):
        collector = MetricsCollector()
        collector.record_request(_request("/api/v1/lab/inventory/3", 200))
        text = collector.get_prometheus_format()
        assert 'http_requests_by_resource{resource="lab"} 1' in text


def test_resource_for_path():
    assert resource_for_path("/api/v1/lab/inventory/3") == "lab"
    assert resource_for_path("/api/v1/appointments") == "appointments"
    assert resource_for_path("/health") == "operational"


def test_logging_middleware_echoes_request_id():
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    client = TestClient(app)
    response = client.get("/ping", headers={"X-Request-ID": "req-42"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-42"

    generated = client.get("/ping").headers["X-Request-ID"]
    assert len(generated) == 8


def test_logging_middleware_replaces_malformed_request_id():
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    client = TestClient(app)
    for bad in ("req 42; drop", "a" * 65, "id_with_underscore"):
        echoed = client.get("/ping", headers={"X-Request-ID": bad}).headers["X-Request-ID"]
        assert echoed != bad
        assert len(echoed) == 8

    assert client.get("/ping", headers={"X-Request-ID": "a" * 64}).headers["X-Request-ID"] == "a" * 64


def test_request_id_from():
    assert request_id_from("Gateway-7f3a") == "Gateway-7f3a"
    assert len(request_id_from(None)) == 8
    assert len(request_id_from("")) == 8
    assert len(request_id_from("x/y")) == 8


def test_collector_counts_api_traffic_by_role():
    collector = MetricsCollector()
    collector.record_request(_request("/api/v1/lab-tests", 200, role="lab_technician"))
    collector.record_request(_request("/api/v1/lab-tests", 401))
    collector.record_request(_request("/health", 200))

    summary = collector.get_summary()
    assert summary["http_requests_by_role"] == {"anonymous": 1, "lab_technician": 1}
    assert 'http_requests_by_role{role="lab_technician"} 1' in collector.get_prometheus_format()


def test_middleware_records_caller_role(auth, test_app):
    test_app.add_middleware(LoggingMiddleware)
    collector = get_metrics_collector()
    before = collector.by_role["pharmacist"]

    response = TestClient(test_app).get("/api/v1/notifications", headers=auth("pharmacist"))
    assert response.status_code == 200
    assert collector.by_role["pharmacist"] == before + 1


class TestLogContext:

    def _format(self, message="hello"):
        record = logging.LogRecord("services.test", logging.INFO, __file__, 1, message, None, None)
        record.item_id = 42
        return json.loads(JSONFormatter().format(record))

    def test_caller_and_request_id_are_attached(self):
        set_request_id("req-1")
        bind_caller(7, "pharmacist")
        try:
            entry = self._format()
        finally:
            clear_request_context()

        assert entry["request_id"] == "req-1"
        assert entry["user_id"] == 7
        assert entry["role"] == "pharmacist"
        assert entry["extra"] == {"item_id": 42}

    def test_no_context_outside_requests(self):
        entry = self._format()
        assert "request_id" not in entry
        assert "user_id" not in entry
        assert entry["message"] == "hello"
