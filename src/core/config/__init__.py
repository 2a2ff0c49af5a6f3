"""
Core Configuration Module
=========================

Centralized, type-safe configuration using Pydantic Settings.
All environment variables are loaded once at startup and validated.

Usage:
    from src.core.config import settings

    gate = settings.sentinel.at_risk_threshold
"""

from src.core.config.settings import (
    Settings,
    settings,
    SentinelSettings,
)

__all__ = [
    "Settings",
    "settings",
    "SentinelSettings",
]
