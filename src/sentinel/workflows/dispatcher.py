"""
Workflow Dispatcher
===================

Synthesizes the phase-4 action for a scored customer:

- at_risk: incident ticket for the account manager, chat alert in the
  tier's customer success channel, ARR-at-risk estimate
- expansion: CRM opportunity for the next tier, chat alert to the sales rep
- monitoring: follow-up steps only

Which entry point runs is decided by the caller through ScorePolicy;
the dispatcher never compares scores against workflow thresholds.
Every external effect goes through an IntegrationGateway and is produced
in a single call, so a cancelled run never leaves a half-applied effect.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from src.sentinel.errors import CustomerNotFoundError
from src.sentinel.models import CustomerAccount, RemedyMatch, ScoreBreakdownEntry
from src.sentinel.policy import (
    ScorePolicy,
    WORKFLOW_AT_RISK,
    WORKFLOW_EXPANSION,
    WORKFLOW_MONITORING,
)
from src.sentinel.store.protocols import TelemetryStore
from src.sentinel.workflows.integrations import (
    ExternalArtifact,
    IntegrationGateway,
    MockIntegrationGateway,
)

logger = logging.getLogger(__name__)


# =============================================================================
# COMMERCIAL TABLES
# =============================================================================

ARR_AT_RISK_BY_TIER = {
    "Enterprise": 120000,
    "Professional": 45000,
}
DEFAULT_ARR_AT_RISK = 12000

NEXT_TIER = {
    "Starter": "Professional",
    "Professional": "Enterprise",
    "Enterprise": "Enterprise+",
}

ARR_UPLIFT_BY_TIER = {
    "Starter": 33000,
    "Professional": 75000,
}
DEFAULT_ARR_UPLIFT = 140000

EXPANSION_WIN_PROBABILITY = 72
OPPORTUNITY_CLOSE_DAYS = 30
EXPANSION_CHANNEL = "#sales-expansion-signals"


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class AtRiskResult:
    incident_id: str
    ticket: ExternalArtifact
    notification: ExternalArtifact
    estimated_arr_at_risk: int
    next_steps: List[str] = field(default_factory=list)
    workflow: str = WORKFLOW_AT_RISK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workflow": self.workflow,
            "incident_id": self.incident_id,
            "ticket": self.ticket.to_dict(),
            "notification": self.notification.to_dict(),
            "estimated_arr_at_risk": self.estimated_arr_at_risk,
            "next_steps": list(self.next_steps),
        }


@dataclass(frozen=True)
class ExpansionResult:
    opportunity: ExternalArtifact
    notification: ExternalArtifact
    suggested_tier: str
    estimated_additional_arr: int
    win_probability: int
    next_steps: List[str] = field(default_factory=list)
    workflow: str = WORKFLOW_EXPANSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workflow": self.workflow,
            "opportunity": self.opportunity.to_dict(),
            "notification": self.notification.to_dict(),
            "suggested_tier": self.suggested_tier,
            "estimated_additional_arr": self.estimated_additional_arr,
            "win_probability": self.win_probability,
            "next_steps": list(self.next_steps),
        }


@dataclass(frozen=True)
class MonitoringResult:
    next_steps: List[str] = field(default_factory=list)
    workflow: str = WORKFLOW_MONITORING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workflow": self.workflow,
            "next_steps": list(self.next_steps),
        }


WorkflowResult = Union[AtRiskResult, ExpansionResult, MonitoringResult]


# =============================================================================
# DISPATCHER
# =============================================================================

class WorkflowDispatcher:
    """
    Builds workflow results for one customer at a time.

    Args:
        store: Source of CustomerAccount lookups
        gateway: Integration gateway; defaults to MockIntegrationGateway
        policy: Used only for the incident priority cut-off
    """

    def __init__(
        self,
        store: TelemetryStore,
        gateway: Optional[IntegrationGateway] = None,
        policy: Optional[ScorePolicy] = None,
    ):
        self.store = store
        self.gateway = gateway or MockIntegrationGateway()
        self.policy = policy or ScorePolicy.from_settings()

    def _account(self, customer_id: str) -> CustomerAccount:
        account = self.store.get_customer(customer_id)
        if account is None:
            raise CustomerNotFoundError(customer_id)
        return account

    def _incident_priority(self, score: int) -> str:
        return "Critical" if score < self.policy.band_critical_below else "High"

    def at_risk(
        self,
        customer_id: str,
        score: int,
        risk_factors: Sequence[ScoreBreakdownEntry],
        remedies: Optional[Sequence[RemedyMatch]] = None,
    ) -> AtRiskResult:
        """Open a churn incident and alert the account manager."""
        account = self._account(customer_id)
        remedies = list(remedies or [])
        negative = [factor for factor in risk_factors if factor.delta < 0]
        priority = self._incident_priority(score)
        key = f"{WORKFLOW_AT_RISK}|{customer_id}|{score}"

        description_lines = [
            f"Automated churn risk detection for {account.name} ({account.tier} tier).",
            "",
            "Risk factors:",
        ]
        description_lines += [f"- {f.factor}: {f.detail} ({f.delta:+d})" for f in negative] or ["- none"]
        if remedies:
            description_lines += ["", "Recommended remedies:"]
            description_lines += [
                f"- {m.remedy.id}: {m.remedy.resolution} (similarity {m.similarity:.2f})"
                for m in remedies[:2]
            ]

        ticket = self.gateway.open_incident_ticket(
            key=key,
            title=f"[CHURN RISK] {account.name} - Health Score {score}/100",
            description="\n".join(description_lines),
            priority=priority,
            assignee=account.account_manager,
            labels=["churn-risk", account.tier.lower(), f"health-{score}"],
        )

        arr_at_risk = ARR_AT_RISK_BY_TIER.get(account.tier, DEFAULT_ARR_AT_RISK)
        notification = self.gateway.send_notification(
            key=key,
            channel=f"#cs-alerts-{account.tier.lower()}",
            recipient=account.account_manager_handle,
            text=(
                f"Churn risk detected for {account.name}: Health Score {score}/100. "
                f"Incident {ticket.id} opened."
            ),
            fields={
                "customer": account.name,
                "health_score": f"{score}/100",
                "priority": priority,
                "arr_at_risk": f"${arr_at_risk:,}",
                "top_factor": negative[0].factor if negative else "n/a",
            },
        )

        logger.info(f"[Workflow] at_risk for {customer_id}: incident {ticket.id} ({priority})")

        return AtRiskResult(
            incident_id=ticket.id,
            ticket=ticket,
            notification=notification,
            estimated_arr_at_risk=arr_at_risk,
            next_steps=[
                f"Account Manager {account.account_manager} notified via Slack {account.account_manager_handle}",
                f"Jira ticket {ticket.id} created and assigned",
                "Emergency call scheduled within 24 hours",
                "SRE on-call paged for technical remediation",
            ],
        )

    def expansion(self, customer_id: str, score: int, tier_utilization: float) -> ExpansionResult:
        """Open an upgrade opportunity and alert the sales rep."""
        account = self._account(customer_id)
        suggested_tier = NEXT_TIER.get(account.tier, "Enterprise+")
        uplift = ARR_UPLIFT_BY_TIER.get(account.tier, DEFAULT_ARR_UPLIFT)
        key = f"{WORKFLOW_EXPANSION}|{customer_id}|{score}|{tier_utilization}"

        opportunity = self.gateway.create_opportunity(
            key=key,
            name=f"{account.name} - Tier Expansion to {suggested_tier}",
            account_id=account.id,
            owner=account.sales_rep,
            amount=uplift,
            probability=EXPANSION_WIN_PROBABILITY,
            signals=[
                f"Tier utilization at {tier_utilization:.1f}%",
                f"Health Score {score}/100",
            ],
            close_in_days=OPPORTUNITY_CLOSE_DAYS,
        )

        notification = self.gateway.send_notification(
            key=key,
            channel=EXPANSION_CHANNEL,
            recipient=account.sales_rep_handle,
            text=(
                f"Expansion signal for {account.name}: {tier_utilization:.1f}% of "
                f"{account.tier} tier used. Opportunity {opportunity.id} created."
            ),
            fields={
                "customer": account.name,
                "current_tier": account.tier,
                "suggested_tier": suggested_tier,
                "additional_arr": f"${uplift:,}",
            },
        )

        logger.info(
            f"[Workflow] expansion for {customer_id}: {account.tier} -> {suggested_tier} "
            f"(opportunity {opportunity.id})"
        )

        return ExpansionResult(
            opportunity=opportunity,
            notification=notification,
            suggested_tier=suggested_tier,
            estimated_additional_arr=uplift,
            win_probability=EXPANSION_WIN_PROBABILITY,
            next_steps=[
                f"Sales Rep {account.sales_rep} notified via Slack",
                f"Salesforce opportunity {opportunity.id} created",
                "Suggest upgrade pitch within 48 hours",
                f"Prepare ROI report for {suggested_tier} tier value",
            ],
        )

    def monitoring(self, customer_id: str, score: int) -> MonitoringResult:
        """No external effect; schedule routine follow-up."""
        self._account(customer_id)
        logger.info(f"[Workflow] monitoring for {customer_id} (score {score})")
        return MonitoringResult(
            next_steps=[
                "Schedule proactive QBR within 30 days",
                "Monitor usage trend next 7 days",
            ],
        )
