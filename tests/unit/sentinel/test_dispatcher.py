"""
Unit tests for sentinel.workflows module.

Tests the WorkflowDispatcher entry points and the mock integration
gateway artifacts they produce.
"""

import pytest

from src.sentinel.errors import CustomerNotFoundError
from src.sentinel.models import RemedyMatch, ScoreBreakdownEntry
from src.sentinel.workflows import (
    AtRiskResult,
    ExpansionResult,
    IntegrationGateway,
    MockIntegrationGateway,
    MonitoringResult,
    WorkflowDispatcher,
)
from tests.conftest import make_account, make_store


RISK_FACTORS = [
    ScoreBreakdownEntry("API Call Decline", -30, "88.0% decline", "declining-api-calls", ("LOG-1", "LOG-7")),
    ScoreBreakdownEntry("High 5xx Error Rate", -20, "18.3%", "500-error", ("LOG-7",)),
    ScoreBreakdownEntry("API Call Growth", 0, "informational", "api-growth"),
]


@pytest.fixture
def dispatcher(fixed_clock):
    store = make_store(make_account("CUST-T01", tier="Enterprise"))
    return WorkflowDispatcher(store, gateway=MockIntegrationGateway(clock=fixed_clock))


def dispatcher_for(tier: str, clock) -> WorkflowDispatcher:
    store = make_store(make_account("CUST-T01", tier=tier))
    return WorkflowDispatcher(store, gateway=MockIntegrationGateway(clock=clock))


class TestAtRisk:
    """Tests for the at-risk workflow."""

    def test_result_shape(self, dispatcher):
        """Incident ticket and notification are synthesized."""
        result = dispatcher.at_risk("CUST-T01", 5, RISK_FACTORS)

        assert isinstance(result, AtRiskResult)
        assert result.incident_id == result.ticket.id
        assert result.ticket.id.startswith("CSRE-")
        assert result.ticket.payload["priority"] == "Critical"
        assert result.ticket.payload["assignee"] == "Dana Lee"
        assert result.ticket.payload["labels"] == ["churn-risk", "enterprise", "health-5"]
        assert result.notification.payload["channel"] == "#cs-alerts-enterprise"
        assert result.notification.payload["dm_to"] == "@dana.lee"
        assert result.estimated_arr_at_risk == 120000
        assert len(result.next_steps) == 4

    def test_high_priority_above_critical_band(self, dispatcher):
        """Scores from 20 upward open High priority incidents."""
        result = dispatcher.at_risk("CUST-T01", 25, RISK_FACTORS)

        assert result.ticket.payload["priority"] == "High"

    def test_description_lists_negative_factors_and_top_two_remedies(self, dispatcher, remedy_corpus):
        """Description names each negative factor and at most two remedies."""
        remedies = [RemedyMatch(r, r.base_similarity) for r in remedy_corpus]
        result = dispatcher.at_risk("CUST-T01", 5, RISK_FACTORS, remedies)

        description = result.ticket.payload["description"]
        assert "API Call Decline" in description
        assert "High 5xx Error Rate" in description
        assert "API Call Growth" not in description
        assert "REM-2025-0442" in description
        assert "REM-2025-0391" in description
        assert "REM-2024-1204" not in description

    @pytest.mark.parametrize("tier,arr", [
        ("Enterprise", 120000),
        ("Professional", 45000),
        ("Starter", 12000),
    ])
    def test_arr_at_risk_by_tier(self, fixed_clock, tier, arr):
        """ARR at risk follows the tier table."""
        result = dispatcher_for(tier, fixed_clock).at_risk("CUST-T01", 10, RISK_FACTORS)

        assert result.estimated_arr_at_risk == arr

    def test_deterministic(self, dispatcher):
        """Same inputs, same identifiers."""
        first = dispatcher.at_risk("CUST-T01", 5, RISK_FACTORS)
        second = dispatcher.at_risk("CUST-T01", 5, RISK_FACTORS)

        assert first == second

    def test_artifacts_are_synthetic(self, dispatcher):
        """Mock artifacts are flagged and use mock:// URLs."""
        result = dispatcher.at_risk("CUST-T01", 5, RISK_FACTORS)

        for artifact in (result.ticket, result.notification):
            assert artifact.synthetic is True
            assert artifact.url.startswith("mock://")


class TestExpansion:
    """Tests for the expansion workflow."""

    @pytest.mark.parametrize("tier,next_tier,uplift", [
        ("Starter", "Professional", 33000),
        ("Professional", "Enterprise", 75000),
        ("Enterprise", "Enterprise+", 140000),
    ])
    def test_tier_upgrade(self, fixed_clock, tier, next_tier, uplift):
        """Suggested tier and uplift follow the upgrade map."""
        result = dispatcher_for(tier, fixed_clock).expansion("CUST-T01", 100, 97.8)

        assert isinstance(result, ExpansionResult)
        assert result.suggested_tier == next_tier
        assert result.estimated_additional_arr == uplift
        assert result.win_probability == 72

    def test_opportunity(self, dispatcher):
        """Opportunity closes 30 days out and the sales rep is notified."""
        result = dispatcher.expansion("CUST-T01", 100, 97.8)

        assert result.opportunity.id.startswith("OPP-")
        assert result.opportunity.payload["close_date"] == "2026-03-28"
        assert result.opportunity.payload["owner"] == "Sam Ortiz"
        assert result.notification.payload["channel"] == "#sales-expansion-signals"
        assert result.notification.payload["dm_to"] == "@sam.ortiz"
        assert f"Salesforce opportunity {result.opportunity.id} created" in result.next_steps


class TestMonitoring:
    """Tests for the monitoring workflow."""

    def test_next_steps_only(self, dispatcher):
        result = dispatcher.monitoring("CUST-T01", 60)

        assert isinstance(result, MonitoringResult)
        assert result.to_dict() == {
            "workflow": "monitoring",
            "next_steps": ["Schedule proactive QBR within 30 days", "Monitor usage trend next 7 days"],
        }


class TestErrors:
    """Tests for unknown customers."""

    @pytest.mark.parametrize("call", [
        lambda d: d.at_risk("CUST-404", 5, []),
        lambda d: d.expansion("CUST-404", 100, 95.0),
        lambda d: d.monitoring("CUST-404", 60),
    ])
    def test_unknown_customer(self, dispatcher, call):
        with pytest.raises(CustomerNotFoundError) as exc_info:
            call(dispatcher)

        assert exc_info.value.customer_id == "CUST-404"


class TestMockIntegrationGateway:
    """Tests for the mock gateway."""

    def test_implements_protocol(self):
        assert isinstance(MockIntegrationGateway(), IntegrationGateway)

    def test_ids_depend_on_key(self, fixed_clock):
        """Different keys yield different ids."""
        gateway = MockIntegrationGateway(clock=fixed_clock)

        a = gateway.send_notification("a", "#c", "@x", "t", {})
        b = gateway.send_notification("b", "#c", "@x", "t", {})

        assert a.id != b.id
        assert gateway.send_notification("a", "#c", "@x", "t", {}).id == a.id

    def test_to_dict_flattens_payload(self, fixed_clock):
        artifact = MockIntegrationGateway(clock=fixed_clock).send_notification(
            "k", "#chan", "@who", "hello", {"a": "b"}
        )

        data = artifact.to_dict()
        assert data["kind"] == "notification"
        assert data["synthetic"] is True
        assert data["channel"] == "#chan"
        assert data["sent_at"] == "2026-02-26T15:46:00+00:00"
