"""
Pipeline Orchestrator
=====================

Runs the four-phase decision pipeline for one customer and reports
every step to an EventSink:

1. Data Retrieval: usage records and support tickets from the store
2. Quantitative Analysis: health score and risk band
3. Contextual Search: remedy ranking, only for at-risk scores
4. Autonomous Execution: at-risk, expansion or monitoring workflow

A run ends with exactly one terminal event (pipeline_complete or error)
unless the subscriber goes away first, in which case it stops at the next
phase boundary without a terminal event. The sink is closed when the run
returns.
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.core.config import SentinelSettings, settings
from src.sentinel.errors import CustomerNotFoundError, PipelineStepError, SentinelError
from src.sentinel.models import (
    PRIORITIES,
    SENTIMENTS,
    CustomerAccount,
    HealthAssessment,
    RemedySearchResult,
    TicketRecord,
    UsageRecord,
)
from src.sentinel.pipeline.events import EventKind, EventSink, ListEventSink, PipelineEvent
from src.sentinel.pipeline.observer import PipelineObserver
from src.sentinel.pipeline.report import FinalReport, build_final_report
from src.sentinel.policy import ScorePolicy, WORKFLOW_AT_RISK, WORKFLOW_EXPANSION
from src.sentinel.retrieval import KeywordRemedyRetriever, RemedySearch
from src.sentinel.scoring import HealthScorer
from src.sentinel.store.protocols import StoreResult, TelemetryStore
from src.sentinel.workflows import WorkflowDispatcher, WorkflowResult

logger = logging.getLogger(__name__)


PHASE_NAMES = {
    1: "Data Retrieval",
    2: "Quantitative Analysis",
    3: "Contextual Search",
    4: "Autonomous Execution",
}

WORKFLOW_DESCRIPTIONS = {
    WORKFLOW_AT_RISK: "Triggering at_risk workflow - incident ticket + account manager alert",
    WORKFLOW_EXPANSION: "Triggering expansion workflow - sales upsell notification",
}
MONITORING_DESCRIPTION = "Monitoring mode - no immediate workflow required"

RESOLUTION_PREVIEW_CHARS = 100


class RunState:
    IDLE = "IDLE"
    PHASE1_RETRIEVAL = "PHASE1_RETRIEVAL"
    PHASE2_SCORING = "PHASE2_SCORING"
    PHASE3_SIMILARITY = "PHASE3_SIMILARITY"
    PHASE3_SKIPPED = "PHASE3_SKIPPED"
    PHASE4_WORKFLOW = "PHASE4_WORKFLOW"
    DONE = "DONE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class RunCancelled(Exception):
    """Subscriber went away; stop without a terminal event."""


@dataclass
class PipelineRun:
    """State of a single run. Owned by the orchestrator for the run's lifetime."""
    customer_id: str
    sink: EventSink
    state: str = RunState.IDLE
    phase: int = 0
    sequence: int = 0
    started_at: float = field(default_factory=time.time)

    # Derived entities
    account: Optional[CustomerAccount] = None
    usage: List[UsageRecord] = field(default_factory=list)
    tickets: List[TicketRecord] = field(default_factory=list)
    assessment: Optional[HealthAssessment] = None
    remedies: Optional[RemedySearchResult] = None
    workflow: Optional[WorkflowResult] = None
    report: Optional[FinalReport] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def finished(self) -> bool:
        return self.state in (RunState.DONE, RunState.FAILED, RunState.CANCELLED)


class PipelineOrchestrator:
    """
    Sequences the decision pipeline and emits its progress.

    Collaborators are injectable; defaults are built from SENTINEL_* settings.
    The orchestrator itself holds no per-run state, so one instance can
    serve concurrent runs.
    """

    def __init__(
        self,
        store: TelemetryStore,
        scorer: Optional[HealthScorer] = None,
        retriever: Optional[RemedySearch] = None,
        dispatcher: Optional[WorkflowDispatcher] = None,
        policy: Optional[ScorePolicy] = None,
        observer: Optional[PipelineObserver] = None,
        config: Optional[SentinelSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or settings.sentinel
        self.policy = policy or ScorePolicy.from_settings(self.config)
        self.store = store
        self.scorer = scorer or HealthScorer(self.policy)
        self.retriever = retriever or KeywordRemedyRetriever(
            store.get_remedies(), keyword_boosts=self.policy.keyword_boosts
        )
        self.dispatcher = dispatcher or WorkflowDispatcher(store, policy=self.policy)
        self.observer = observer or PipelineObserver()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # =========================================================================
    # EVENT PLUMBING
    # =========================================================================

    async def _emit(self, run: PipelineRun, kind: str, payload: Dict[str, Any]) -> None:
        if run.sink.closed:
            raise RunCancelled()
        run.sequence += 1
        event = PipelineEvent(
            kind=kind,
            payload=payload,
            timestamp=self.clock().isoformat(),
            sequence=run.sequence,
        )
        if not await run.sink.emit(event):
            raise RunCancelled()
        self.observer.event_emitted(kind)

    async def _boundary(self, run: PipelineRun) -> None:
        """Phase boundary: optional pacing, then a cancellation check."""
        if self.config.phase_delay_ms > 0:
            await asyncio.sleep(self.config.phase_delay_ms / 1000)
        if run.sink.closed:
            raise RunCancelled()

    @contextmanager
    def _step(self, phase: int, category: str):
        """Re-raise unexpected failures as PipelineStepError for the given phase."""
        try:
            with self.observer.track_step(category):
                yield
        except (PipelineStepError, RunCancelled):
            raise
        except Exception as e:
            raise PipelineStepError(str(e) or type(e).__name__, phase=phase, category=category) from e

    async def _read(self, phase: int, reader: Callable[[str], StoreResult], customer_id: str) -> StoreResult:
        with self._step(phase, "store"):
            result = await asyncio.to_thread(reader, customer_id)
        if not result.success:
            raise PipelineStepError(
                result.error or f"{result.source_name} read failed",
                phase=phase,
                category="store",
            )
        return result

    async def _start_phase(self, run: PipelineRun, phase: int, state: str, description: str) -> float:
        run.phase = phase
        run.state = state
        self.observer.phase_started(run.customer_id, phase, PHASE_NAMES[phase])
        await self._emit(run, EventKind.PHASE_START, {
            "phase": phase,
            "name": PHASE_NAMES[phase],
            "description": description,
        })
        return time.time()

    async def _complete_phase(self, run: PipelineRun, phase: int, started: float, **extra) -> None:
        self.observer.phase_finished(run.customer_id, phase, time.time() - started)
        await self._emit(run, EventKind.PHASE_COMPLETE, {"phase": phase, "status": "success", **extra})
        await self._boundary(run)

    # =========================================================================
    # PAYLOADS
    # =========================================================================

    def _usage_payload(self, result: StoreResult) -> Dict[str, Any]:
        size = self.config.usage_preview_size
        preview = result.records[-size:] if size > 0 else []
        return {
            "phase": 1,
            "tool": "search_usage_logs",
            "index": result.index,
            "query": result.query,
            "hits_count": result.total,
            "latency_ms": round(result.latency_ms, 2),
            "preview": [
                {
                    "log_id": r.id,
                    "date": r.timestamp[:10],
                    "api_calls": r.api_calls,
                    "error_5xx": r.error_rate_5xx,
                    "tier_utilization": r.tier_utilization_pct,
                }
                for r in preview
            ],
        }

    def _truncate_subject(self, subject: str) -> str:
        limit = self.config.subject_preview_chars
        return subject[:limit] + "..." if len(subject) > limit else subject

    def _ticket_payload(self, result: StoreResult) -> Dict[str, Any]:
        tickets = result.records
        return {
            "phase": 1,
            "tool": "search_support_tickets",
            "index": result.index,
            "query": result.query,
            "hits_count": result.total,
            "latency_ms": round(result.latency_ms, 2),
            "sentiment_agg": {s: sum(1 for t in tickets if t.sentiment == s) for s in SENTIMENTS},
            "priority_agg": {p: sum(1 for t in tickets if t.priority == p) for p in PRIORITIES},
            "preview": [
                {
                    "ticket_id": t.id,
                    "priority": t.priority,
                    "sentiment": t.sentiment,
                    "status": t.status,
                    "subject": self._truncate_subject(t.subject),
                }
                for t in tickets[:self.config.ticket_preview_size]
            ],
        }

    @staticmethod
    def _remedy_payload(result: RemedySearchResult) -> Dict[str, Any]:
        hits = []
        for match in result.hits:
            resolution = match.remedy.resolution
            if len(resolution) > RESOLUTION_PREVIEW_CHARS:
                resolution = resolution[:RESOLUTION_PREVIEW_CHARS] + "..."
            hits.append({
                "remedy_id": match.remedy.id,
                "similarity_score": match.similarity,
                "resolution_preview": resolution,
                "outcome": match.remedy.outcome,
                "time_to_resolve_hrs": match.remedy.resolve_hours,
            })
        return {
            "phase": 3,
            "tool": "search_remedies",
            "index": result.index,
            "query_type": result.query_type,
            "total": result.total,
            "hits": hits,
        }

    # =========================================================================
    # PHASES
    # =========================================================================

    async def _retrieve(self, run: PipelineRun) -> None:
        started = await self._start_phase(
            run, 1, RunState.PHASE1_RETRIEVAL,
            "Querying usage telemetry and support tickets",
        )

        usage = await self._read(1, self.store.get_usage, run.customer_id)
        run.usage = list(usage.records)
        await self._emit(run, EventKind.TOOL_RESULT, self._usage_payload(usage))

        tickets = await self._read(1, self.store.get_tickets, run.customer_id)
        run.tickets = list(tickets.records)
        await self._emit(run, EventKind.TOOL_RESULT, self._ticket_payload(tickets))

        await self._complete_phase(run, 1, started)

    async def _score(self, run: PipelineRun) -> None:
        started = await self._start_phase(
            run, 2, RunState.PHASE2_SCORING,
            "Running health score calculation",
        )

        with self._step(2, "scoring"):
            assessment = self.scorer.score(run.usage, run.tickets)
        run.assessment = assessment
        self.observer.scored(run.customer_id, assessment.score, assessment.risk_level)

        await self._emit(run, EventKind.TOOL_RESULT, {
            "phase": 2,
            "tool": "calculate_health_score",
            **assessment.to_dict(),
        })
        await self._complete_phase(run, 2, started, score=assessment.score)

    async def _search(self, run: PipelineRun) -> None:
        score = run.assessment.score
        if not self.policy.requires_similarity(score):
            run.phase = 3
            run.state = RunState.PHASE3_SKIPPED
            self.observer.phase_finished(run.customer_id, 3, 0.0, skipped=True)
            await self._emit(run, EventKind.PHASE_SKIP, {
                "phase": 3,
                "name": PHASE_NAMES[3],
                "reason": (
                    f"Health Score {score} >= {self.policy.at_risk_threshold} "
                    f"- similarity search not required"
                ),
            })
            return

        started = await self._start_phase(
            run, 3, RunState.PHASE3_SIMILARITY,
            f"Health Score {score} < {self.policy.at_risk_threshold} - retrieving similar past remedies",
        )

        with self._step(3, "retrieval"):
            remedies = self.retriever.rank(run.assessment.breakdown, top_k=self.policy.similarity_top_k)
        run.remedies = remedies
        self.observer.remedies_found(len(remedies.hits))

        await self._emit(run, EventKind.TOOL_RESULT, self._remedy_payload(remedies))
        await self._complete_phase(run, 3, started, remedies_found=len(remedies.hits))

    async def _execute(self, run: PipelineRun) -> None:
        assessment = run.assessment
        workflow = self.policy.select_workflow(assessment.score, has_usage=bool(run.usage))
        started = await self._start_phase(
            run, 4, RunState.PHASE4_WORKFLOW,
            WORKFLOW_DESCRIPTIONS.get(workflow, MONITORING_DESCRIPTION),
        )

        with self._step(4, "workflow"):
            if workflow == WORKFLOW_AT_RISK:
                result = await asyncio.to_thread(
                    self.dispatcher.at_risk,
                    run.customer_id,
                    assessment.score,
                    assessment.risk_factors,
                    run.remedies.hits if run.remedies else None,
                )
            elif workflow == WORKFLOW_EXPANSION:
                result = await asyncio.to_thread(
                    self.dispatcher.expansion, run.customer_id, assessment.score, assessment.tier_utilization
                )
            else:
                result = await asyncio.to_thread(self.dispatcher.monitoring, run.customer_id, assessment.score)
        run.workflow = result
        self.observer.workflow_dispatched(run.customer_id, workflow)

        await self._emit(run, EventKind.TOOL_RESULT, {
            "phase": 4,
            "tool": f"{workflow}_workflow",
            **result.to_dict(),
        })

        with self._step(4, "internal"):
            run.report = build_final_report(
                assessment, result, run.usage, run.tickets, run.remedies, self.policy
            )

        await self._complete_phase(run, 4, started)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    async def run(self, customer_id: str, sink: EventSink) -> PipelineRun:
        """
        Run the pipeline for a customer.

        Args:
            customer_id: Customer to analyze
            sink: Receives events in emission order; closed when the run returns

        Returns:
            The finished PipelineRun (state DONE, FAILED or CANCELLED)
        """
        run = PipelineRun(customer_id=customer_id, sink=sink)
        self.observer.run_started(customer_id)
        status = "success"

        try:
            account = await asyncio.to_thread(self.store.get_customer, customer_id)
            if account is None:
                raise CustomerNotFoundError(customer_id)
            run.account = account

            await self._emit(run, EventKind.CONNECTED, {
                "customer_id": account.id,
                "customer_name": account.name,
                "timestamp": self.clock().isoformat(),
            })

            await self._retrieve(run)
            await self._score(run)
            await self._search(run)
            await self._execute(run)

            await self._emit(run, EventKind.PIPELINE_COMPLETE, {
                "customer_id": customer_id,
                "health_score": run.assessment.score,
                "risk_level": run.assessment.risk_level,
                "final_report": run.report.to_dict(),
                "all_logs": [r.to_dict() for r in run.usage],
                "all_tickets": [t.to_dict() for t in run.tickets],
            })
            run.state = RunState.DONE

        except RunCancelled:
            status = "cancelled"
            run.state = RunState.CANCELLED
            logger.info(f"[Pipeline] Subscriber gone, stopping run for {customer_id} at phase {run.phase}")

        except asyncio.CancelledError:
            status = "cancelled"
            run.state = RunState.CANCELLED
            raise

        except Exception as e:
            status = "error"
            run.state = RunState.FAILED
            if isinstance(e, PipelineStepError):
                phase, category = e.phase, e.category
            elif isinstance(e, SentinelError):
                phase, category = run.phase, e.category
            else:
                phase, category = run.phase, "internal"
                logger.exception(f"[Pipeline] Unexpected failure for {customer_id}")
            run.error = {"message": str(e), "category": category, "phase": phase}
            logger.error(f"[Pipeline] {customer_id} failed in phase {phase} ({category}): {e}")
            try:
                await self._emit(run, EventKind.ERROR, run.error)
            except RunCancelled:
                status = "cancelled"

        finally:
            self.observer.run_finished(customer_id, status, time.time() - run.started_at)
            await sink.close()

        return run

    async def collect(self, customer_id: str) -> ListEventSink:
        """Run headless and return the collected events."""
        sink = ListEventSink()
        await self.run(customer_id, sink)
        return sink
