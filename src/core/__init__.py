"""
Core Infrastructure Module
==========================

Shared infrastructure components used by the API and the decision pipeline.

This module provides:
- Configuration management (config/)
- Monitoring helpers (monitoring/)

Usage:
    from src.core.config import settings, SentinelSettings
    from src.core.monitoring import MetricRegistry
"""

from src.core.config import settings, SentinelSettings

__all__ = [
    "settings",
    "SentinelSettings",
]
