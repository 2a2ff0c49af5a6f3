"""
In-Memory Telemetry Store
=========================

Read-only store over fixed record sets. Used as the default backing
store (loaded from the seed dataset) and directly in tests with
hand-built records.
"""

import logging
import time
from typing import Dict, Iterable, List, Optional

from src.sentinel.models import CustomerAccount, RemedyRecord, TicketRecord, UsageRecord
from src.sentinel.store.protocols import BaseTelemetryStore, StoreResult

logger = logging.getLogger(__name__)


class InMemoryTelemetryStore(BaseTelemetryStore):
    """
    Telemetry store backed by in-process dictionaries.

    Usage records are sorted oldest first at construction time so every
    read already satisfies the ordering contract.
    """

    source_name = "memory"

    USAGE_INDEX = "usage_logs"
    TICKET_INDEX = "support_tickets"

    def __init__(
        self,
        customers: Iterable[CustomerAccount] = (),
        usage: Optional[Dict[str, Iterable[UsageRecord]]] = None,
        tickets: Optional[Dict[str, Iterable[TicketRecord]]] = None,
        remedies: Iterable[RemedyRecord] = (),
    ):
        self._customers: Dict[str, CustomerAccount] = {c.id: c for c in customers}
        self._usage: Dict[str, List[UsageRecord]] = {
            customer_id: sorted(records, key=lambda r: r.timestamp)
            for customer_id, records in (usage or {}).items()
        }
        self._tickets: Dict[str, List[TicketRecord]] = {
            customer_id: list(records) for customer_id, records in (tickets or {}).items()
        }
        self._remedies: List[RemedyRecord] = list(remedies)

    def get_usage(self, customer_id: str) -> StoreResult:
        start = time.time()
        records = list(self._usage.get(customer_id, []))
        return self._create_result(
            records,
            latency_ms=(time.time() - start) * 1000,
            index=self.USAGE_INDEX,
            query=f'customer_id:"{customer_id}"',
        )

    def get_tickets(self, customer_id: str) -> StoreResult:
        start = time.time()
        records = list(self._tickets.get(customer_id, []))
        return self._create_result(
            records,
            latency_ms=(time.time() - start) * 1000,
            index=self.TICKET_INDEX,
            query=f'customer_id:"{customer_id}"',
        )

    def get_customer(self, customer_id: str) -> Optional[CustomerAccount]:
        return self._customers.get(customer_id)

    def list_customers(self) -> List[CustomerAccount]:
        return list(self._customers.values())

    def get_remedies(self) -> List[RemedyRecord]:
        return list(self._remedies)

    def health_check(self):
        status = super().health_check()
        status.update({
            "customers": len(self._customers),
            "remedies": len(self._remedies),
        })
        return status


def create_seed_store(reference_time: Optional[str] = None) -> InMemoryTelemetryStore:
    """Build an in-memory store holding the demo seed dataset."""
    from src.sentinel.store.seed import build_seed_dataset

    dataset = build_seed_dataset(reference_time)
    logger.info(
        f"[Store] Seed dataset loaded: {len(dataset.customers)} customers, "
        f"{len(dataset.remedies)} remedies"
    )
    return InMemoryTelemetryStore(
        customers=dataset.customers,
        usage=dataset.usage,
        tickets=dataset.tickets,
        remedies=dataset.remedies,
    )
