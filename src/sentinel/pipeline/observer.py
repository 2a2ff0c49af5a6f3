"""
Pipeline Observer
=================

Unified telemetry interface for pipeline runs.

Combines:
- Prometheus metrics (runs, phase latency, score distribution, workflows)
- Logging (phase transitions and failures)
"""

import logging

from src.core.monitoring import (
    COUNT_BUCKETS,
    LATENCY_BUCKETS_FAST,
    LATENCY_BUCKETS_SLOW,
    SCORE_BUCKETS,
    MetricRegistry,
    StepTracker,
)

logger = logging.getLogger(__name__)


class PipelineMetrics(MetricRegistry):
    """Prometheus metrics for the decision pipeline."""

    def __init__(self):
        super().__init__()
        self.register("runs", "counter", "sentinel_pipeline_runs_total",
                      "Pipeline runs by terminal status", ["status"])
        self.register("run_duration", "histogram", "sentinel_pipeline_run_duration_seconds",
                      "End-to-end pipeline run duration", [], buckets=LATENCY_BUCKETS_SLOW)
        self.register("phase_duration", "histogram", "sentinel_pipeline_phase_duration_seconds",
                      "Duration of each pipeline phase", ["phase"], buckets=LATENCY_BUCKETS_FAST)
        self.register("health_score", "histogram", "sentinel_health_score",
                      "Distribution of computed health scores", [], buckets=SCORE_BUCKETS)
        self.register("workflows", "counter", "sentinel_workflows_total",
                      "Workflows dispatched by type", ["workflow"])
        self.register("events", "counter", "sentinel_events_total",
                      "Pipeline events emitted by kind", ["kind"])
        self.register("remedies_returned", "histogram", "sentinel_remedies_returned",
                      "Remedies returned per similarity search", [], buckets=COUNT_BUCKETS)
        self.register("active_runs", "gauge", "sentinel_active_runs",
                      "Pipeline runs currently in progress", [])
        self.register("steps", "counter", "sentinel_pipeline_steps_total",
                      "Pipeline steps by outcome", ["step", "status"])
        self.register("step_duration", "histogram", "sentinel_pipeline_step_duration_seconds",
                      "Duration of each pipeline step", ["step"], buckets=LATENCY_BUCKETS_FAST)


class PipelineObserver:
    """
    Records run telemetry.

    One observer is shared by all runs; it holds no per-run state.
    """

    def __init__(self, metrics_enabled: bool = True, logging_enabled: bool = True):
        self.metrics = PipelineMetrics() if metrics_enabled else None
        self.logging_enabled = logging_enabled
        self._active = 0

    def _inc(self, key: str, **labels):
        if self.metrics is not None:
            self.metrics.inc(key, **labels)

    def _observe(self, key: str, value: float, **labels):
        if self.metrics is not None:
            self.metrics.observe(key, value, **labels)

    def run_started(self, customer_id: str):
        self._active += 1
        if self.metrics is not None:
            self.metrics.set("active_runs", self._active)
        if self.logging_enabled:
            logger.info(f"[Pipeline] Run started: customer={customer_id}")

    def phase_started(self, customer_id: str, phase: int, name: str):
        if self.logging_enabled:
            logger.info(f"[Pipeline] customer={customer_id} phase {phase} ({name}) started")

    def phase_finished(self, customer_id: str, phase: int, duration_s: float, skipped: bool = False):
        self._observe("phase_duration", duration_s, phase=str(phase))
        if self.logging_enabled:
            status = "skipped" if skipped else "complete"
            logger.info(
                f"[Pipeline] customer={customer_id} phase {phase} {status} "
                f"({duration_s * 1000:.1f}ms)"
            )

    def track_step(self, step: str) -> StepTracker:
        """Count and time one step (store, scoring, retrieval, workflow, report)."""
        if self.metrics is None:
            return StepTracker(None, None, step)
        return StepTracker(self.metrics.get("steps"), self.metrics.get("step_duration"), step)

    def event_emitted(self, kind: str):
        self._inc("events", kind=kind)

    def scored(self, customer_id: str, score: int, risk_level: str):
        self._observe("health_score", score)
        if self.logging_enabled:
            logger.info(f"[Pipeline] customer={customer_id} score={score} risk={risk_level}")

    def remedies_found(self, count: int):
        self._observe("remedies_returned", count)

    def workflow_dispatched(self, customer_id: str, workflow: str):
        self._inc("workflows", workflow=workflow)
        if self.logging_enabled:
            logger.info(f"[Pipeline] customer={customer_id} workflow={workflow}")

    def run_finished(self, customer_id: str, status: str, duration_s: float):
        """Record the end of a run; status is success, error or cancelled."""
        self._active = max(0, self._active - 1)
        if self.metrics is not None:
            self.metrics.set("active_runs", self._active)
        self._inc("runs", status=status)
        self._observe("run_duration", duration_s)
        if not self.logging_enabled:
            return
        if status == "error":
            logger.error(f"[Pipeline] Run failed: customer={customer_id} ({duration_s:.2f}s)")
        else:
            logger.info(f"[Pipeline] Run {status}: customer={customer_id} ({duration_s:.2f}s)")
