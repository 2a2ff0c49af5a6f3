"""
Unit tests for sentinel.store module.

Tests the in-memory telemetry store and the seed dataset.
"""

from src.sentinel.store import BaseTelemetryStore, StoreResult, TelemetryStore
from src.sentinel.store.seed import build_seed_dataset
from tests.conftest import REFERENCE_TIME, make_account, make_store, make_usage


class TestStoreResult:
    """Tests for StoreResult dataclass."""

    def test_defaults(self):
        result = StoreResult()

        assert result.records == []
        assert result.success is True
        assert result.error is None
        assert result.total == 0


class TestInMemoryTelemetryStore:
    """Tests for InMemoryTelemetryStore."""

    def test_protocol(self, seed_store):
        assert isinstance(seed_store, TelemetryStore)
        assert isinstance(seed_store, BaseTelemetryStore)

    def test_usage_sorted_oldest_first(self):
        """Records are returned oldest first whatever the input order."""
        usage = make_usage([100, 200, 300])
        store = make_store(make_account(), usage=list(reversed(usage)))

        result = store.get_usage("CUST-T01")

        assert [r.api_calls for r in result.records] == [100, 200, 300]
        assert result.index == "usage_logs"
        assert result.source_name == "memory"

    def test_unknown_customer_reads_are_empty(self, seed_store):
        """Unknown ids are empty results, not errors."""
        assert seed_store.get_usage("CUST-404").records == []
        assert seed_store.get_tickets("CUST-404").success is True
        assert seed_store.get_customer("CUST-404") is None

    def test_health_check(self, seed_store):
        status = seed_store.health_check()

        assert status["source"] == "memory"
        assert status["available"] is True
        assert status["customers"] == 5
        assert status["remedies"] == 3


class TestSeedDataset:
    """Tests for the seed dataset."""

    def test_shape(self):
        dataset = build_seed_dataset(REFERENCE_TIME)

        assert [c.id for c in dataset.customers] == [
            "CUST-001", "CUST-002", "CUST-003", "CUST-004", "CUST-005",
        ]
        assert all(len(records) == 7 for records in dataset.usage.values())
        assert len(dataset.tickets["CUST-001"]) == 5
        assert len(dataset.remedies) == 3

    def test_deterministic(self):
        """Two builds at the same reference time are identical."""
        assert build_seed_dataset(REFERENCE_TIME) == build_seed_dataset(REFERENCE_TIME)

    def test_record_ids(self):
        dataset = build_seed_dataset(REFERENCE_TIME)

        assert dataset.usage["CUST-001"][-1].id == "LOG-CUST-001-20260226"
        assert dataset.usage["CUST-001"][0].id == "LOG-CUST-001-20260220"
        assert dataset.tickets["CUST-001"][0].id == "TKT-CUST-001-1000"

    def test_tier_utilization_derived(self):
        """Utilization is api_calls over tier limit, rounded to one decimal."""
        last = build_seed_dataset(REFERENCE_TIME).usage["CUST-002"][-1]

        assert last.tier_utilization_pct == round(last.api_calls / last.tier_limit * 100, 1)
        assert last.tier_utilization_pct == 97.8
