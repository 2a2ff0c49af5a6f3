"""
Telemetry Store
===============

Read-only access to usage telemetry, support tickets, the account
directory and the remedy corpus.

Usage:
    from src.sentinel.store import create_seed_store

    store = create_seed_store()
    usage = store.get_usage("CUST-001")
"""

from src.sentinel.store.protocols import (
    TelemetryStore,
    BaseTelemetryStore,
    StoreResult,
)
from src.sentinel.store.memory_store import (
    InMemoryTelemetryStore,
    create_seed_store,
)

__all__ = [
    "TelemetryStore",
    "BaseTelemetryStore",
    "StoreResult",
    "InMemoryTelemetryStore",
    "create_seed_store",
]
