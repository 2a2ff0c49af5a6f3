"""
Unit tests for core.config and api.settings modules.
"""

from unittest.mock import patch

from src.api.settings import APISettings
from src.core.config import SentinelSettings, Settings


class TestSentinelSettings:
    """Tests for SentinelSettings."""

    def test_defaults(self):
        config = SentinelSettings()

        assert config.at_risk_threshold == 40
        assert config.expansion_threshold == 85
        assert config.similarity_top_k == 3
        assert config.keyword_boosts == {"500-error": 0.05, "declining-api-calls": 0.04}

    def test_env_prefix(self):
        with patch.dict("os.environ", {"SENTINEL_PHASE_DELAY_MS": "250", "SENTINEL_BOOST_500_ERROR": "0.1"}):
            config = SentinelSettings()

        assert config.phase_delay_ms == 250
        assert config.keyword_boosts["500-error"] == 0.1


class TestUnifiedSettings:
    """Tests for the Settings container."""

    def test_lazy_and_cached(self):
        container = Settings()

        assert container.sentinel is container.sentinel

    def test_reload_rereads_environment(self):
        container = Settings()
        assert container.sentinel.usage_preview_size == 3

        with patch.dict("os.environ", {"SENTINEL_USAGE_PREVIEW_SIZE": "5"}):
            container.reload()
            assert container.sentinel.usage_preview_size == 5


class TestAPISettings:
    """Tests for APISettings."""

    def test_defaults(self):
        config = APISettings()

        assert config.port == 3001
        assert config.service_name == "Revenue Sentinel API"

    def test_env_override(self):
        with patch.dict("os.environ", {"API_PORT": "8080", "API_LOG_LEVEL": "DEBUG"}):
            config = APISettings()

        assert config.port == 8080
        assert config.log_level == "DEBUG"
