"""
Unified Configuration for Revenue Sentinel

Centralized, type-safe configuration using Pydantic Settings.
All environment variables are loaded once at startup and validated.

Usage:
    from src.core.config import settings

    # Access scoring thresholds
    gate = settings.sentinel.at_risk_threshold

    # Access pacing
    delay = settings.sentinel.phase_delay_ms
"""

from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# SENTINEL SETTINGS (Decision pipeline - thresholds, pacing, previews)
# =============================================================================

class SentinelSettings(BaseSettings):
    """Decision pipeline configuration with every policy threshold consolidated."""

    # === Workflow gates ===
    at_risk_threshold: int = 40
    expansion_threshold: int = 85

    # === Risk bands (upper bounds, exclusive) ===
    band_critical_below: int = 20
    band_high_below: int = 40
    band_medium_below: int = 60
    band_low_below: int = 85

    # === Usage rules ===
    api_decline_ratio: float = 0.20
    api_decline_penalty: int = 30
    api_growth_ratio: float = 0.05
    error_5xx_threshold: float = 5.0
    error_5xx_penalty: int = 20
    error_4xx_threshold: float = 8.0
    error_4xx_penalty: int = 5

    # === Ticket rules ===
    critical_ticket_penalty: int = 15
    critical_ticket_penalty_cap: int = 30
    negative_sentiment_ratio: float = 0.40
    negative_sentiment_penalty: int = 10

    # === Bonuses ===
    tier_utilization_threshold: float = 90.0
    tier_utilization_bonus: int = 20
    positive_sentiment_ratio: float = 0.60
    positive_engagement_bonus: int = 10

    # === Similarity retrieval ===
    similarity_top_k: int = 3
    boost_500_error: float = 0.05
    boost_declining_api_calls: float = 0.04

    # === Event stream ===
    usage_preview_size: int = 3
    ticket_preview_size: int = 3
    subject_preview_chars: int = 60
    phase_delay_ms: int = 0

    # === Seed dataset ===
    reference_time: str = "2026-02-26T15:46:00+00:00"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SENTINEL_", extra="ignore")

    @property
    def keyword_boosts(self) -> Dict[str, float]:
        """Similarity boosts keyed by risk category token."""
        return {
            "500-error": self.boost_500_error,
            "declining-api-calls": self.boost_declining_api_calls,
        }


# =============================================================================
# UNIFIED SETTINGS
# =============================================================================

class Settings:
    """
    Unified settings container providing access to all configuration.

    Usage:
        from src.core.config import settings

        threshold = settings.sentinel.at_risk_threshold
    """

    def __init__(self):
        self._sentinel: Optional[SentinelSettings] = None

    @property
    def sentinel(self) -> SentinelSettings:
        if self._sentinel is None:
            self._sentinel = SentinelSettings()
        return self._sentinel

    def reload(self) -> None:
        """Drop cached settings so the next access re-reads the environment."""
        self._sentinel = None


# Singleton instance
settings = Settings()
