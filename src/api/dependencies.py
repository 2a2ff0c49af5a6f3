"""
FastAPI Dependency Injection
============================

Provides dependency injection for API components.

Usage:
    from fastapi import Depends
    from src.api.dependencies import get_orchestrator, get_telemetry_store

    @router.get("/api/analyze/{customer_id}")
    async def analyze(
        customer_id: str,
        orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
    ):
        ...

Overriding in tests:
    app.dependency_overrides[get_telemetry_store] = lambda: my_store
"""

import logging
from functools import lru_cache

from fastapi import Depends

from src.api.settings import api_settings, APISettings
from src.core.config import settings as core_settings
from src.sentinel.pipeline import PipelineObserver, PipelineOrchestrator
from src.sentinel.store import InMemoryTelemetryStore, TelemetryStore, create_seed_store

logger = logging.getLogger(__name__)


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings() -> APISettings:
    """
    Get API settings.

    Can be overridden in tests:
        app.dependency_overrides[get_settings] = lambda: MockSettings()
    """
    return api_settings


# =============================================================================
# Telemetry Store Dependency
# =============================================================================

@lru_cache(maxsize=1)
def _create_telemetry_store() -> InMemoryTelemetryStore:
    """Create and cache the seed-backed telemetry store."""
    store = create_seed_store(core_settings.sentinel.reference_time)
    logger.info("[DI] TelemetryStore initialized")
    return store


def get_telemetry_store() -> TelemetryStore:
    """
    Dependency for the telemetry store.

    Returns cached instance with thread-safe initialization.
    """
    return _create_telemetry_store()


# =============================================================================
# Pipeline Dependencies
# =============================================================================

@lru_cache(maxsize=1)
def _create_observer() -> PipelineObserver:
    """Create and cache the shared PipelineObserver."""
    observer = PipelineObserver()
    logger.info("[DI] PipelineObserver initialized")
    return observer


def get_orchestrator(store: TelemetryStore = Depends(get_telemetry_store)) -> PipelineOrchestrator:
    """
    Dependency for PipelineOrchestrator.

    Built per request around the injected store so store overrides in
    tests flow through; the observer is shared.
    """
    return PipelineOrchestrator(store, observer=_create_observer())


# =============================================================================
# Cleanup Utilities
# =============================================================================

def clear_dependency_cache():
    """
    Clear all cached dependencies.

    Useful for testing or when settings change.
    """
    _create_telemetry_store.cache_clear()
    _create_observer.cache_clear()
    core_settings.reload()
    logger.info("[DI] All dependency caches cleared")
