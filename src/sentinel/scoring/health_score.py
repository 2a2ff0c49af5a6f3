"""
Health Score
============

Turns usage telemetry and support tickets into a 0-100 health score,
a risk band, and the ordered list of rules that fired.

Deductions:
    -30  API calls declined > 20% (first day vs last day)
    -20  Latest 5xx error rate > 5%
    -5   Latest 4xx error rate > 8%
    -15  Per open P1/P2 ticket (max -30)
    -10  Negative sentiment ratio > 40%

Bonuses:
    +20  Tier utilization > 90% (expansion signal)
    +10  Positive sentiment ratio > 60% with no open P1/P2 tickets

Every rule is evaluated on every call and the breakdown keeps evaluation
order. Scoring is pure: same input, same HealthAssessment.
"""

import logging
from typing import List, Optional, Sequence

from src.sentinel.models import HealthAssessment, ScoreBreakdownEntry, TicketRecord, UsageRecord
from src.sentinel.policy import ScorePolicy

logger = logging.getLogger(__name__)


class HealthScorer:
    """
    Applies the fixed-order scoring rules from a ScorePolicy.

    Empty inputs are zero-signal, not errors: no usage records means the
    decline ratio is 0, no tickets means every ticket ratio is 0.
    """

    def __init__(self, policy: Optional[ScorePolicy] = None):
        self.policy = policy or ScorePolicy.from_settings()

    @staticmethod
    def _ratio(count: int, total: int) -> float:
        return count / total if total > 0 else 0.0

    def score(
        self,
        usage: Sequence[UsageRecord],
        tickets: Sequence[TicketRecord],
    ) -> HealthAssessment:
        """
        Score a customer.

        Args:
            usage: Usage records, oldest first
            tickets: Ticket records in any order

        Returns:
            HealthAssessment with clamped score, band and breakdown
        """
        p = self.policy
        score = 100
        breakdown: List[ScoreBreakdownEntry] = []

        first = usage[0] if usage else None
        last = usage[-1] if usage else None

        # Rule 1: API call decline / growth
        first_calls = first.api_calls if first else 0
        last_calls = last.api_calls if last else 0
        decline_ratio = (first_calls - last_calls) / first_calls if first_calls > 0 else 0.0

        if decline_ratio > p.api_decline_ratio:
            score -= p.api_decline_penalty
            breakdown.append(ScoreBreakdownEntry(
                factor="API Call Decline",
                delta=-p.api_decline_penalty,
                detail=(
                    f"{decline_ratio * 100:.1f}% decline over {len(usage)} days "
                    f"({first_calls:,} -> {last_calls:,})"
                ),
                category="declining-api-calls",
                reference_ids=(first.id, last.id),
            ))
        elif decline_ratio < -p.api_growth_ratio:
            breakdown.append(ScoreBreakdownEntry(
                factor="API Call Growth",
                delta=0,
                detail=f"{abs(decline_ratio) * 100:.1f}% growth over {len(usage)} days",
                category="api-growth",
                reference_ids=(first.id, last.id),
            ))

        # Rule 2: 5xx error rate
        latest_5xx = last.error_rate_5xx if last else 0.0
        if latest_5xx > p.error_5xx_threshold:
            score -= p.error_5xx_penalty
            breakdown.append(ScoreBreakdownEntry(
                factor="High 5xx Error Rate",
                delta=-p.error_5xx_penalty,
                detail=f"Current 500-error rate: {latest_5xx:.1f}% (threshold: {p.error_5xx_threshold:g}%)",
                category="500-error",
                reference_ids=(last.id,),
            ))

        # Rule 3: 4xx error rate
        latest_4xx = last.error_rate_4xx if last else 0.0
        if latest_4xx > p.error_4xx_threshold:
            score -= p.error_4xx_penalty
            breakdown.append(ScoreBreakdownEntry(
                factor="Elevated 4xx Error Rate",
                delta=-p.error_4xx_penalty,
                detail=f"Current 400-error rate: {latest_4xx:.1f}% (warning threshold: {p.error_4xx_threshold:g}%)",
                category="4xx-error",
                reference_ids=(last.id,),
            ))

        # Rule 4: open P1/P2 tickets
        open_critical = [t for t in tickets if t.is_critical and t.is_open]
        ticket_penalty = min(len(open_critical) * p.critical_ticket_penalty, p.critical_ticket_penalty_cap)
        if ticket_penalty > 0:
            score -= ticket_penalty
            breakdown.append(ScoreBreakdownEntry(
                factor="Open Critical Tickets",
                delta=-ticket_penalty,
                detail=(
                    f"{len(open_critical)} open P1/P2 tickets "
                    f"(-{p.critical_ticket_penalty} each, max -{p.critical_ticket_penalty_cap})"
                ),
                category="critical-tickets",
                reference_ids=tuple(t.id for t in open_critical),
            ))

        # Rule 5: negative sentiment
        negative_ratio = self._ratio(sum(1 for t in tickets if t.sentiment == "negative"), len(tickets))
        positive_ratio = self._ratio(sum(1 for t in tickets if t.sentiment == "positive"), len(tickets))

        if negative_ratio > p.negative_sentiment_ratio:
            score -= p.negative_sentiment_penalty
            breakdown.append(ScoreBreakdownEntry(
                factor="Negative Sentiment Spike",
                delta=-p.negative_sentiment_penalty,
                detail=(
                    f"{negative_ratio * 100:.0f}% of tickets express negative sentiment "
                    f"(threshold: {p.negative_sentiment_ratio * 100:.0f}%)"
                ),
                category="negative-sentiment",
            ))

        # Rule 6: tier utilization bonus
        latest_utilization = last.tier_utilization_pct if last else 0.0
        if latest_utilization > p.tier_utilization_threshold:
            score += p.tier_utilization_bonus
            breakdown.append(ScoreBreakdownEntry(
                factor="Tier Limit Approaching (Expansion Signal)",
                delta=p.tier_utilization_bonus,
                detail=f"Tier utilization at {latest_utilization:.1f}% - upgrade candidate",
                category="tier-utilization",
                reference_ids=(last.id,),
            ))

        # Rule 7: positive engagement bonus
        if positive_ratio > p.positive_sentiment_ratio and not open_critical:
            score += p.positive_engagement_bonus
            breakdown.append(ScoreBreakdownEntry(
                factor="Positive Engagement Signal",
                delta=p.positive_engagement_bonus,
                detail=f"{positive_ratio * 100:.0f}% positive sentiment with no critical open tickets",
                category="positive-engagement",
            ))

        score = max(0, min(100, score))
        band = p.classify(score)

        logger.debug(
            f"Scored: score={score} band={band.level} "
            f"rules={[entry.factor for entry in breakdown]}"
        )

        return HealthAssessment(
            score=score,
            risk_level=band.level,
            risk_label=band.label,
            breakdown=tuple(breakdown),
            tier_utilization=latest_utilization,
        )
