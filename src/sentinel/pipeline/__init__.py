"""
Decision Pipeline
=================

Usage:
    from src.sentinel.pipeline import PipelineOrchestrator, EventChannel

    orchestrator = PipelineOrchestrator(store)
    channel = EventChannel()
    task = asyncio.create_task(orchestrator.run("CUST-001", channel))
    async for event in channel:
        print(event.to_sse())
"""

from src.sentinel.pipeline.events import (
    EventKind,
    PipelineEvent,
    EventSink,
    ListEventSink,
    EventChannel,
)
from src.sentinel.pipeline.report import FinalReport, build_final_report
from src.sentinel.pipeline.observer import PipelineObserver, PipelineMetrics
from src.sentinel.pipeline.orchestrator import (
    PipelineOrchestrator,
    PipelineRun,
    RunState,
    PHASE_NAMES,
)

__all__ = [
    "EventKind",
    "PipelineEvent",
    "EventSink",
    "ListEventSink",
    "EventChannel",
    "FinalReport",
    "build_final_report",
    "PipelineObserver",
    "PipelineMetrics",
    "PipelineOrchestrator",
    "PipelineRun",
    "RunState",
    "PHASE_NAMES",
]
