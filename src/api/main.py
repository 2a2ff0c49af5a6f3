"""
Revenue Sentinel API
================================================================================

FastAPI front door for the decision pipeline.

Endpoints:
  GET  /                          - Service info
  GET  /api/customers             - List customers
  GET  /api/analyze/{customer_id} - Run pipeline (Server-Sent Events)
  GET  /api/health                - Liveness check
  GET  /metrics                   - Prometheus metrics

Usage:
    uvicorn src.api.main:app --host 0.0.0.0 --port 3001
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import APIError, api_exception_handler, generic_exception_handler
from src.api.routers import analysis_router, monitoring_router
from src.api.settings import api_settings

logging.basicConfig(
    level=getattr(logging, api_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title=api_settings.service_name,
        version=api_settings.version,
        description="Customer health scoring with a streamed, phased decision pipeline",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=api_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(APIError, api_exception_handler)
    application.add_exception_handler(Exception, generic_exception_handler)

    application.include_router(analysis_router)
    application.include_router(monitoring_router)

    logger.info(f"{api_settings.service_name} v{api_settings.version} configured")
    return application


app = create_app()


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=api_settings.host, port=api_settings.port)
