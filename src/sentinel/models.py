"""
Sentinel Data Model
===================

Immutable records read from the telemetry store and the derived
entities produced by one pipeline run.

Read-side records (never modified once produced):
- CustomerAccount: account directory entry (tier, owners)
- UsageRecord: one day of API telemetry
- TicketRecord: one support ticket
- RemedyRecord: one past resolution in the remedy corpus

Derived per run (owned by the orchestrator, never persisted):
- ScoreBreakdownEntry / HealthAssessment
- RemedyMatch

Every record exposes to_dict() returning the snake_case wire shape used
in event payloads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


PRIORITIES = ("P1", "P2", "P3", "P4")
SENTIMENTS = ("positive", "neutral", "negative")
STATUSES = ("open", "pending", "resolved")


# =============================================================================
# READ-SIDE RECORDS
# =============================================================================

@dataclass(frozen=True)
class CustomerAccount:
    """Account directory entry."""
    id: str
    name: str
    tier: str
    tier_limit: int
    account_manager: str
    account_manager_handle: str
    sales_rep: str
    scenario: str = "unknown"

    @property
    def sales_rep_handle(self) -> str:
        return "@" + self.sales_rep.lower().replace(" ", ".")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier,
            "tier_limit": self.tier_limit,
            "account_manager": self.account_manager,
            "scenario": self.scenario,
        }


@dataclass(frozen=True)
class UsageRecord:
    """One day of usage telemetry for a customer."""
    id: str
    customer_id: str
    timestamp: str
    api_calls: int
    error_rate_5xx: float
    error_rate_4xx: float
    active_features: FrozenSet[str]
    tier_limit: int
    tier_utilization_pct: float

    @classmethod
    def build(
        cls,
        id: str,
        customer_id: str,
        timestamp: str,
        api_calls: int,
        error_rate_5xx: float,
        error_rate_4xx: float,
        active_features,
        tier_limit: int,
    ) -> "UsageRecord":
        """Create a record, deriving tier utilization from calls and limit."""
        utilization = round(api_calls / tier_limit * 100, 1) if tier_limit > 0 else 0.0
        return cls(
            id=id,
            customer_id=customer_id,
            timestamp=timestamp,
            api_calls=api_calls,
            error_rate_5xx=error_rate_5xx,
            error_rate_4xx=error_rate_4xx,
            active_features=frozenset(active_features),
            tier_limit=tier_limit,
            tier_utilization_pct=utilization,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_id": self.id,
            "customer_id": self.customer_id,
            "timestamp": self.timestamp,
            "api_calls": self.api_calls,
            "error_rate_5xx": self.error_rate_5xx,
            "error_rate_4xx": self.error_rate_4xx,
            "active_features": sorted(self.active_features),
            "tier_limit": self.tier_limit,
            "tier_utilization_pct": self.tier_utilization_pct,
        }


@dataclass(frozen=True)
class TicketRecord:
    """Support ticket."""
    id: str
    customer_id: str
    created_at: str
    priority: str
    sentiment: str
    status: str
    subject: str
    category: str
    assignee: Optional[str] = None

    @property
    def is_critical(self) -> bool:
        return self.priority in ("P1", "P2")

    @property
    def is_open(self) -> bool:
        return self.status != "resolved"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.id,
            "customer_id": self.customer_id,
            "created_at": self.created_at,
            "priority": self.priority,
            "sentiment": self.sentiment,
            "status": self.status,
            "subject": self.subject,
            "category": self.category,
            "assignee": self.assignee,
        }


@dataclass(frozen=True)
class RemedyRecord:
    """Past successful resolution with a precomputed base similarity."""
    id: str
    error_pattern: str
    resolution: str
    segment: str
    resolve_hours: float
    outcome: str
    base_similarity: float

    @property
    def pattern_tokens(self) -> Tuple[str, ...]:
        """Keyword tokens of the error pattern, e.g. ('500-error', 'api-core')."""
        return tuple(token.strip() for token in self.error_pattern.split("+") if token.strip())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "remedy_id": self.id,
            "error_pattern": self.error_pattern,
            "resolution": self.resolution,
            "customer_segment": self.segment,
            "time_to_resolve_hrs": self.resolve_hours,
            "outcome": self.outcome,
            "similarity_score": self.base_similarity,
        }


# =============================================================================
# DERIVED ENTITIES
# =============================================================================

@dataclass(frozen=True)
class ScoreBreakdownEntry:
    """One scoring rule that fired."""
    factor: str
    delta: int
    detail: str
    category: str
    reference_ids: Tuple[str, ...] = ()

    @property
    def reference_id(self) -> Optional[str]:
        return self.reference_ids[0] if self.reference_ids else None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "factor": self.factor,
            "delta": self.delta,
            "detail": self.detail,
            "category": self.category,
        }
        if self.reference_ids:
            result["reference_id"] = self.reference_id
            result["reference_ids"] = list(self.reference_ids)
        return result


@dataclass(frozen=True)
class HealthAssessment:
    """Score, risk classification and the rules that produced them."""
    score: int
    risk_level: str
    risk_label: str
    breakdown: Tuple[ScoreBreakdownEntry, ...] = ()
    tier_utilization: float = 0.0

    @property
    def risk_factors(self) -> List[ScoreBreakdownEntry]:
        """Entries that lowered the score."""
        return [entry for entry in self.breakdown if entry.delta < 0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "risk_level": self.risk_level,
            "risk_label": self.risk_label,
            "breakdown": [entry.to_dict() for entry in self.breakdown],
            "tier_utilization": self.tier_utilization,
        }


@dataclass(frozen=True)
class RemedyMatch:
    """Remedy with its adjusted similarity."""
    remedy: RemedyRecord
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        result = self.remedy.to_dict()
        result["similarity_score"] = self.similarity
        return result


@dataclass
class RemedySearchResult:
    """Ranked remedies plus search metadata."""
    hits: List[RemedyMatch] = field(default_factory=list)
    total: int = 0
    index: str = "remedies"
    query_type: str = "keyword-boosted re-rank"

    @property
    def top(self) -> Optional[RemedyMatch]:
        return self.hits[0] if self.hits else None
