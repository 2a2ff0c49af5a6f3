"""
Scoring Engine
==============

Pure, deterministic health scoring.

Usage:
    from src.sentinel.scoring import HealthScorer

    assessment = HealthScorer().score(usage_records, ticket_records)
"""

from src.sentinel.scoring.health_score import HealthScorer

__all__ = ["HealthScorer"]
