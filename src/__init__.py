"""
Revenue Sentinel - Source Package
=================================

This package contains all source code for the service:
- api: FastAPI front door (customer listing, SSE analysis stream, health checks)
- core: Shared utilities (configuration, monitoring)
- sentinel: Decision pipeline domain (store, scoring, retrieval, workflows)

Quick Imports:
    from src.sentinel.pipeline import PipelineOrchestrator, ListEventSink
    from src.sentinel.scoring import HealthScorer
    from src.core.monitoring import MetricRegistry, StepTracker
"""

# Lazy imports - only import when accessed to avoid triggering
# unnecessary dependencies during test collection
__all__ = ["api", "core", "sentinel"]


def __getattr__(name):
    """Lazy module loading to avoid import side effects."""
    if name == "api":
        from src import api
        return api
    elif name == "core":
        from src import core
        return core
    elif name == "sentinel":
        from src import sentinel
        return sentinel
    raise AttributeError(f"module 'src' has no attribute {name!r}")
