"""
API Configuration Settings
==========================

Centralized, type-safe configuration for the Revenue Sentinel API.
Follows the same pattern as core/config/settings.py for consistency.

Usage:
    from src.api.settings import api_settings

    port = api_settings.port
    origins = api_settings.cors_origins
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """
    API-specific configuration.

    All settings can be overridden via API_* environment variables.
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    # Service identity
    service_name: str = "Revenue Sentinel API"
    version: str = "1.0.0"

    # CORS (dashboard dev server by default)
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="API_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Get cached API settings instance.

    Returns:
        APISettings singleton
    """
    return APISettings()


# Convenience singleton
api_settings = get_api_settings()
