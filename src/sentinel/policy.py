"""
Score Policy
============

Single table of every threshold used by the decision pipeline.

The scoring engine reads rule thresholds and deltas from it, the
orchestrator reads the phase-3 gate and workflow selection from it, and
the dispatcher is only ever called on the branch the policy chose.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from src.core.config import SentinelSettings, settings


WORKFLOW_AT_RISK = "at_risk"
WORKFLOW_EXPANSION = "expansion"
WORKFLOW_MONITORING = "monitoring"


@dataclass(frozen=True)
class RiskBand:
    """Named score range with a fixed label."""
    level: str
    label: str
    upper_bound: Optional[int]  # exclusive; None for the top band


@dataclass(frozen=True)
class ScorePolicy:
    """Thresholds and deltas for scoring, retrieval gating and workflow selection."""

    # Workflow gates (strict comparisons)
    at_risk_threshold: int = 40
    expansion_threshold: int = 85

    # Risk bands
    band_critical_below: int = 20
    band_high_below: int = 40
    band_medium_below: int = 60
    band_low_below: int = 85

    # Usage rules
    api_decline_ratio: float = 0.20
    api_decline_penalty: int = 30
    api_growth_ratio: float = 0.05
    error_5xx_threshold: float = 5.0
    error_5xx_penalty: int = 20
    error_4xx_threshold: float = 8.0
    error_4xx_penalty: int = 5

    # Ticket rules
    critical_ticket_penalty: int = 15
    critical_ticket_penalty_cap: int = 30
    negative_sentiment_ratio: float = 0.40
    negative_sentiment_penalty: int = 10

    # Bonuses
    tier_utilization_threshold: float = 90.0
    tier_utilization_bonus: int = 20
    positive_sentiment_ratio: float = 0.60
    positive_engagement_bonus: int = 10

    # Similarity retrieval
    similarity_top_k: int = 3
    keyword_boosts: Dict[str, float] = field(default_factory=lambda: dict(settings.sentinel.keyword_boosts))

    @classmethod
    def from_settings(cls, config: Optional[SentinelSettings] = None) -> "ScorePolicy":
        """Build the policy from SENTINEL_* settings."""
        config = config or settings.sentinel
        return cls(
            at_risk_threshold=config.at_risk_threshold,
            expansion_threshold=config.expansion_threshold,
            band_critical_below=config.band_critical_below,
            band_high_below=config.band_high_below,
            band_medium_below=config.band_medium_below,
            band_low_below=config.band_low_below,
            api_decline_ratio=config.api_decline_ratio,
            api_decline_penalty=config.api_decline_penalty,
            api_growth_ratio=config.api_growth_ratio,
            error_5xx_threshold=config.error_5xx_threshold,
            error_5xx_penalty=config.error_5xx_penalty,
            error_4xx_threshold=config.error_4xx_threshold,
            error_4xx_penalty=config.error_4xx_penalty,
            critical_ticket_penalty=config.critical_ticket_penalty,
            critical_ticket_penalty_cap=config.critical_ticket_penalty_cap,
            negative_sentiment_ratio=config.negative_sentiment_ratio,
            negative_sentiment_penalty=config.negative_sentiment_penalty,
            tier_utilization_threshold=config.tier_utilization_threshold,
            tier_utilization_bonus=config.tier_utilization_bonus,
            positive_sentiment_ratio=config.positive_sentiment_ratio,
            positive_engagement_bonus=config.positive_engagement_bonus,
            similarity_top_k=config.similarity_top_k,
            keyword_boosts=config.keyword_boosts,
        )

    @property
    def bands(self) -> Tuple[RiskBand, ...]:
        return (
            RiskBand("CRITICAL", "Immediate action required", self.band_critical_below),
            RiskBand("HIGH", "At-risk - churn likely within 30 days", self.band_high_below),
            RiskBand("MEDIUM", "Recovering - monitor closely", self.band_medium_below),
            RiskBand("LOW", "Healthy - routine engagement", self.band_low_below),
            RiskBand("EXPANSION", "Expansion opportunity detected", None),
        )

    def classify(self, score: int) -> RiskBand:
        """Map a clamped score to its risk band."""
        for band in self.bands:
            if band.upper_bound is None or score < band.upper_bound:
                return band
        return self.bands[-1]

    def requires_similarity(self, score: int) -> bool:
        """Phase 3 gate: remedies are looked up only for at-risk scores."""
        return score < self.at_risk_threshold

    def select_workflow(self, score: int, has_usage: bool = True) -> str:
        """
        Choose the phase-4 workflow from the score.

        A customer with no usage telemetry keeps the starting score of 100
        without any expansion evidence, so it stays on monitoring.
        """
        if score < self.at_risk_threshold:
            return WORKFLOW_AT_RISK
        if score > self.expansion_threshold and has_usage:
            return WORKFLOW_EXPANSION
        return WORKFLOW_MONITORING
