"""
Revenue Sentinel
================

Phased decision pipeline: telemetry retrieval, health scoring,
remedy search and workflow dispatch, streamed as progress events.

Subpackages:
- store: read-only telemetry store and seed dataset
- scoring: health score engine
- retrieval: remedy ranking
- workflows: at-risk / expansion / monitoring dispatch
- pipeline: orchestrator, events and final report
"""

from src.sentinel.errors import SentinelError, CustomerNotFoundError, PipelineStepError
from src.sentinel.policy import ScorePolicy

__all__ = [
    "SentinelError",
    "CustomerNotFoundError",
    "PipelineStepError",
    "ScorePolicy",
]
