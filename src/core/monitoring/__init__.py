"""
Core Monitoring Module
======================

Unified observability patterns for the API and the decision pipeline.

Usage:
    from src.core.monitoring import (
        get_or_create_counter,
        get_or_create_histogram,
        MetricRegistry,
        StepTracker,
    )
"""

from src.core.monitoring.metrics import (
    # Prometheus enabled flag
    PROMETHEUS_ENABLED,

    # Safe metric creation helpers
    get_or_create_counter,
    get_or_create_histogram,
    get_or_create_gauge,

    # Standard buckets
    LATENCY_BUCKETS_FAST,
    LATENCY_BUCKETS_SLOW,
    SCORE_BUCKETS,
    COUNT_BUCKETS,

    # Classes
    MetricRegistry,
    StepTracker,

    # Utility functions
    get_metrics_response,
)

__all__ = [
    "PROMETHEUS_ENABLED",
    "get_or_create_counter",
    "get_or_create_histogram",
    "get_or_create_gauge",
    "LATENCY_BUCKETS_FAST",
    "LATENCY_BUCKETS_SLOW",
    "SCORE_BUCKETS",
    "COUNT_BUCKETS",
    "MetricRegistry",
    "StepTracker",
    "get_metrics_response",
]
