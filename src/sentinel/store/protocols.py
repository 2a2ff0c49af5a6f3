"""
Telemetry Store Protocols
=========================

Abstract interfaces for the read-only telemetry store.
Allows a real backing store (search index, warehouse) to replace the
in-memory seed store without touching pipeline logic.

Reads return a StoreResult instead of raising, so a failing store is
reported as a value and the orchestrator decides how it surfaces.

Usage:
    class WarehouseStore(BaseTelemetryStore):
        source_name = "warehouse"

        def get_usage(self, customer_id: str) -> StoreResult:
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from src.sentinel.models import CustomerAccount, RemedyRecord


@dataclass
class StoreResult:
    """
    Standardized result from a store read.

    All store reads return this to enable uniform handling.
    """
    records: List[Any] = field(default_factory=list)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    source_name: str = "unknown"
    index: str = ""
    query: str = ""

    @property
    def total(self) -> int:
        return len(self.records)


@runtime_checkable
class TelemetryStore(Protocol):
    """
    Protocol defining the read contract of the telemetry store.

    Implementations:
        - InMemoryTelemetryStore: seed dataset held in memory
        - Future: search index, warehouse
    """

    def get_usage(self, customer_id: str) -> StoreResult:
        """Usage records for a customer, oldest first (empty if unknown)."""
        ...

    def get_tickets(self, customer_id: str) -> StoreResult:
        """Ticket records for a customer (empty if unknown)."""
        ...

    def get_customer(self, customer_id: str) -> Optional[CustomerAccount]:
        """Account directory lookup; None if unknown."""
        ...

    def list_customers(self) -> List[CustomerAccount]:
        """All known accounts."""
        ...

    def get_remedies(self) -> List[RemedyRecord]:
        """The static remedy corpus."""
        ...

    def health_check(self) -> Dict[str, Any]:
        """Return detailed health status."""
        ...


class BaseTelemetryStore(ABC):
    """
    Abstract base class for telemetry stores.

    Provides common functionality and enforces interface implementation.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Unique name identifying this store type."""
        pass

    @abstractmethod
    def get_usage(self, customer_id: str) -> StoreResult:
        pass

    @abstractmethod
    def get_tickets(self, customer_id: str) -> StoreResult:
        pass

    @abstractmethod
    def get_customer(self, customer_id: str) -> Optional[CustomerAccount]:
        pass

    @abstractmethod
    def list_customers(self) -> List[CustomerAccount]:
        pass

    @abstractmethod
    def get_remedies(self) -> List[RemedyRecord]:
        pass

    def is_available(self) -> bool:
        return True

    def health_check(self) -> Dict[str, Any]:
        """Default health check implementation."""
        return {
            "source": self.source_name,
            "available": self.is_available(),
        }

    def _create_result(
        self,
        records: List[Any],
        latency_ms: float,
        index: str = "",
        query: str = "",
        success: bool = True,
        error: Optional[str] = None,
    ) -> StoreResult:
        """Helper to create standardized StoreResult."""
        return StoreResult(
            records=records,
            latency_ms=latency_ms,
            success=success,
            error=error,
            source_name=self.source_name,
            index=index,
            query=query,
        )
