"""
Monitoring Router
=================

Handles health and monitoring endpoints:
- GET / - Service info
- GET /api/health - Liveness check
- GET /metrics - Prometheus metrics
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from src.api.dependencies import get_settings, get_telemetry_store
from src.api.settings import APISettings
from src.core.monitoring import get_metrics_response
from src.sentinel.store import TelemetryStore

router = APIRouter(tags=["Monitoring"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    timestamp: str
    details: Dict[str, Any] = {}


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/", include_in_schema=False)
async def root(config: APISettings = Depends(get_settings)):
    """API info."""
    return {
        "name": config.service_name,
        "version": config.version,
        "description": "Customer health scoring with streamed decision pipeline",
        "endpoints": {
            "customers": "/api/customers",
            "analyze": "/api/analyze/{customer_id}",
            "health": "/api/health",
            "metrics": "/metrics",
        },
    }


@router.get("/api/health", response_model=HealthResponse)
async def health(
    config: APISettings = Depends(get_settings),
    store: TelemetryStore = Depends(get_telemetry_store),
):
    """
    Liveness check.

    Reports the telemetry store status; a store that reports itself
    unavailable marks the service degraded.
    """
    details = store.health_check()
    status = "healthy" if details.get("available", True) else "degraded"

    return HealthResponse(
        status=status,
        service=config.service_name,
        timestamp=datetime.now(timezone.utc).isoformat(),
        details={"store": details},
    )


@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    content, content_type = get_metrics_response()
    return Response(content=content, media_type=content_type)
