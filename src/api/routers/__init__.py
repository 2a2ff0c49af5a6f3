"""
API Routers
===========

Modular FastAPI routers for the Revenue Sentinel API.

Routers:
- analysis: /api/customers, /api/analyze/{customer_id}
- monitoring: /, /api/health, /metrics

Usage:
    from src.api.routers import analysis_router, monitoring_router

    app.include_router(analysis_router)
    app.include_router(monitoring_router)
"""

from src.api.routers.analysis import router as analysis_router
from src.api.routers.monitoring import router as monitoring_router

__all__ = [
    "analysis_router",
    "monitoring_router",
]
