"""
Core Monitoring Metrics
=======================

Prometheus metrics utilities shared by the API and the decision pipeline.

This module provides:
1. Safe metric creation helpers (avoid duplicate registration errors)
2. MetricRegistry class for component-specific metrics
3. StepTracker context manager for timing pipeline steps

Usage:
    from src.core.monitoring import (
        get_or_create_counter,
        get_or_create_histogram,
        MetricRegistry,
        StepTracker,
    )
"""

import os
import time
from typing import Dict, Any, List, Optional
import logging

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

logger = logging.getLogger(__name__)

PROMETHEUS_ENABLED = os.getenv("PROMETHEUS_METRICS", "true").lower() == "true"


# =============================================================================
# SAFE METRIC CREATION HELPERS
# =============================================================================

def get_or_create_counter(
    name: str,
    description: str,
    labelnames: Optional[List[str]] = None,
) -> Optional[Counter]:
    """
    Get existing counter or create new one.
    Safely handles duplicate registration errors from Prometheus.
    """
    if not PROMETHEUS_ENABLED:
        return None
    try:
        return Counter(name, description, labelnames or [])
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


def get_or_create_histogram(
    name: str,
    description: str,
    labelnames: Optional[List[str]] = None,
    buckets: Optional[List[float]] = None,
) -> Optional[Histogram]:
    """
    Get existing histogram or create new one.
    Safely handles duplicate registration errors from Prometheus.
    """
    if not PROMETHEUS_ENABLED:
        return None
    try:
        if buckets:
            return Histogram(name, description, labelnames or [], buckets=buckets)
        return Histogram(name, description, labelnames or [])
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


def get_or_create_gauge(
    name: str,
    description: str,
    labelnames: Optional[List[str]] = None,
) -> Optional[Gauge]:
    """Get existing gauge or create new one."""
    if not PROMETHEUS_ENABLED:
        return None
    try:
        return Gauge(name, description, labelnames or [])
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


# =============================================================================
# STANDARD BUCKETS
# =============================================================================

# Latency buckets (in seconds)
LATENCY_BUCKETS_FAST = [0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
LATENCY_BUCKETS_SLOW = [0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0]

# Health score buckets (0-100 scale, aligned with risk bands)
SCORE_BUCKETS = [0, 20, 40, 60, 85, 100]

# Count buckets
COUNT_BUCKETS = [0, 1, 2, 5, 10, 20, 50, 100, 200, 500]


# =============================================================================
# METRIC REGISTRY CLASS
# =============================================================================

class MetricRegistry:
    """
    Base registry for Prometheus metrics.
    Provides a unified interface for metric operations.

    Usage:
        registry = MetricRegistry()
        registry.register("runs", "counter", "sentinel_runs_total", "Total runs", ["status"])
        registry.inc("runs", status="success")
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}

    def register(
        self,
        key: str,
        metric_type: str,
        name: str,
        description: str,
        labels: List[str] = None,
        buckets: List[float] = None
    ):
        """Register a new metric."""
        if not PROMETHEUS_ENABLED:
            return

        if metric_type == "counter":
            self._metrics[key] = get_or_create_counter(name, description, labels)
        elif metric_type == "gauge":
            self._metrics[key] = get_or_create_gauge(name, description, labels)
        elif metric_type == "histogram":
            self._metrics[key] = get_or_create_histogram(name, description, labels, buckets=buckets)
        else:
            raise ValueError(f"Unknown metric type: {metric_type}")

    def get(self, key: str):
        """Get metric by key, returns None if not available."""
        return self._metrics.get(key)

    def inc(self, key: str, value: float = 1, **labels):
        """Increment counter."""
        m = self.get(key)
        if m:
            if labels:
                m.labels(**labels).inc(value)
            else:
                m.inc(value)

    def observe(self, key: str, value: float, **labels):
        """Observe histogram value."""
        m = self.get(key)
        if m:
            if labels:
                m.labels(**labels).observe(value)
            else:
                m.observe(value)

    def set(self, key: str, value: float, **labels):
        """Set gauge value."""
        m = self.get(key)
        if m:
            if labels:
                m.labels(**labels).set(value)
            else:
                m.set(value)


class StepTracker:
    """
    Context manager counting and timing one pipeline step.

    The counter is labelled (step, status) and the histogram (step).
    Either may be None; metric failures are logged and never raised.
    Exceptions from the tracked block propagate unchanged.
    """

    def __init__(
        self,
        counter: Optional[Counter],
        histogram: Optional[Histogram],
        step: str,
    ):
        self.counter = counter
        self.histogram = histogram
        self.step = step
        self.start_time = None
        self.status = "success"

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time

        if exc_type is not None:
            self.status = "error"

        if self.counter:
            try:
                self.counter.labels(step=self.step, status=self.status).inc()
            except Exception as e:
                logger.debug(f"Failed to increment step counter: {e}")

        if self.histogram:
            try:
                self.histogram.labels(step=self.step).observe(duration)
            except Exception as e:
                logger.debug(f"Failed to observe step duration: {e}")

        return False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def get_metrics_response():
    """Generate Prometheus metrics response."""
    if not PROMETHEUS_ENABLED:
        return "# Prometheus metrics disabled", "text/plain"
    return generate_latest(), CONTENT_TYPE_LATEST
