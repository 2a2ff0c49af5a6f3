"""
Unit tests for the Revenue Sentinel API.

Tests cover:
- Service info, health and metrics endpoints
- Customer directory
- SSE analysis stream (framing, ordering, terminal event)
- Error handling
"""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_telemetry_store
from src.api.main import app
from src.api.routers.analysis import _event_stream
from src.core.config import SentinelSettings
from src.sentinel.pipeline import PipelineObserver, PipelineOrchestrator, RunState
from src.sentinel.store import InMemoryTelemetryStore
from tests.conftest import make_account


def parse_sse(body: str):
    """Split an event-stream body into (event, data) pairs."""
    events = []
    for frame in body.split("\n\n"):
        if not frame.strip():
            continue
        fields = {}
        for line in frame.split("\n"):
            name, _, value = line.partition(": ")
            fields[name] = value
        events.append((fields["event"], json.loads(fields["data"]), int(fields["id"])))
    return events


@pytest.fixture
def client(seed_store):
    """TestClient wired to the fixed-time seed store."""
    app.dependency_overrides[get_telemetry_store] = lambda: seed_store
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# MONITORING ENDPOINTS
# =============================================================================

class TestMonitoringEndpoints:
    """Tests for info, health and metrics endpoints."""

    def test_root_returns_service_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Revenue Sentinel API"
        assert data["endpoints"]["analyze"] == "/api/analyze/{customer_id}"

    def test_health_reports_store(self, client):
        """Test that /api/health returns 200 with store details."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["details"]["store"]["customers"] == 5

    def test_health_degraded_when_store_unavailable(self):
        class DownStore(InMemoryTelemetryStore):
            def health_check(self):
                return {"source": "memory", "available": False}

        app.dependency_overrides[get_telemetry_store] = lambda: DownStore()
        try:
            response = TestClient(app).get("/api/health")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_metrics_endpoint(self, client):
        """Metrics are disabled in the test environment."""
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "metrics" in response.text.lower()


# =============================================================================
# CUSTOMER DIRECTORY
# =============================================================================

class TestCustomerEndpoints:
    """Tests for /api/customers."""

    def test_lists_seed_customers(self, client):
        response = client.get("/api/customers")

        assert response.status_code == 200
        customers = response.json()
        assert [c["id"] for c in customers] == ["CUST-001", "CUST-002", "CUST-003", "CUST-004", "CUST-005"]
        assert customers[0] == {
            "id": "CUST-001",
            "name": "Acme Corp",
            "tier": "Enterprise",
            "tier_limit": 500000,
            "account_manager": "Sarah Chen",
            "scenario": "critical",
        }


# =============================================================================
# ANALYSIS STREAM
# =============================================================================

class TestAnalyzeEndpoint:
    """Tests for the SSE analysis stream."""

    def test_stream_headers(self, client):
        response = client.get("/api/analyze/CUST-002")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

    def test_critical_stream(self, client):
        """Stream opens with connected and ends with one pipeline_complete."""
        response = client.get("/api/analyze/CUST-001")

        events = parse_sse(response.text)
        kinds = [kind for kind, _, _ in events]
        assert kinds[0] == "connected"
        assert kinds[-1] == "pipeline_complete"
        assert kinds.count("pipeline_complete") == 1
        assert "error" not in kinds
        assert "phase_skip" not in kinds
        assert [seq for _, _, seq in events] == list(range(1, len(events) + 1))

        final = events[-1][1]["payload"]
        assert final["customer_id"] == "CUST-001"
        assert final["health_score"] == 5
        assert final["final_report"]["type"] == "at_risk"

    def test_expansion_stream_skips_similarity(self, client):
        events = parse_sse(client.get("/api/analyze/CUST-002").text)

        skips = [data for kind, data, _ in events if kind == "phase_skip"]
        assert len(skips) == 1
        assert skips[0]["payload"]["phase"] == 3
        assert events[-1][1]["payload"]["final_report"]["type"] == "expansion"

    def test_stream_for_customer_without_data(self):
        """A known customer with no records still completes."""
        store = InMemoryTelemetryStore(customers=[make_account("CUST-EMPTY")])
        app.dependency_overrides[get_telemetry_store] = lambda: store
        try:
            response = TestClient(app).get("/api/analyze/CUST-EMPTY")
        finally:
            app.dependency_overrides.clear()

        events = parse_sse(response.text)
        final = events[-1][1]["payload"]
        assert events[-1][0] == "pipeline_complete"
        assert final["health_score"] == 100
        assert final["final_report"]["type"] == "monitoring"


# =============================================================================
# CLIENT DISCONNECT
# =============================================================================

class RecordingOrchestrator(PipelineOrchestrator):
    """Keeps a handle on the run task and its sink."""

    async def run(self, customer_id, sink):
        self.task = asyncio.current_task()
        self.sink = sink
        self.run_state = None
        try:
            run = await super().run(customer_id, sink)
        except asyncio.CancelledError:
            self.run_state = RunState.CANCELLED
            raise
        self.run_state = run.state
        return run


class TestClientDisconnect:
    """Closing the SSE generator cancels the run."""

    @pytest.mark.asyncio
    async def test_disconnect_cancels_run(self, seed_store):
        # Pacing keeps the run parked at a phase boundary after the first frames
        orchestrator = RecordingOrchestrator(
            seed_store,
            observer=PipelineObserver(metrics_enabled=False),
            config=SentinelSettings(phase_delay_ms=5000),
        )
        stream = _event_stream(orchestrator, "CUST-001")

        first = await stream.__anext__()
        assert first.startswith("id: 1\nevent: connected\n")

        await stream.aclose()

        with pytest.raises(asyncio.CancelledError):
            await orchestrator.task
        assert orchestrator.task.cancelled()
        assert orchestrator.run_state == RunState.CANCELLED
        assert orchestrator.sink.closed is True
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()


# =============================================================================
# ERROR HANDLING
# =============================================================================

class TestErrorHandling:
    """Tests for API error handling."""

    def test_unknown_customer_returns_404(self, client):
        """Unknown customers are rejected before the stream opens."""
        response = client.get("/api/analyze/CUST-999")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/json")
        data = response.json()
        assert data["error_code"] == "NOT_FOUND"
        assert data["details"] == {"customer_id": "CUST-999"}
        assert "CUST-999" in data["message"]

    def test_unknown_route(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
