"""
Sentinel Domain Errors
======================

Exceptions raised inside the decision pipeline. The API layer maps
CustomerNotFoundError to a 404 before a run starts; everything raised
during a run is turned into a single terminal `error` event by the
orchestrator.
"""

from typing import Optional


class SentinelError(Exception):
    """Base class for decision pipeline errors."""

    category: str = "internal"

    def __init__(self, message: str, category: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if category:
            self.category = category


class CustomerNotFoundError(SentinelError):
    """Unknown customer id."""

    category = "not_found"

    def __init__(self, customer_id: str):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class PipelineStepError(SentinelError):
    """A phase failed; carries the phase number and failure category."""

    def __init__(self, message: str, phase: int, category: str = "internal"):
        super().__init__(message, category=category)
        self.phase = phase
