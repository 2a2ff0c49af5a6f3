"""
Shared test fixtures for the Revenue Sentinel service.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Metrics are read at import time; keep Prometheus off for the suite
os.environ.setdefault("PROMETHEUS_METRICS", "false")

from src.sentinel.models import CustomerAccount, RemedyRecord, TicketRecord, UsageRecord  # noqa: E402
from src.sentinel.store import InMemoryTelemetryStore, create_seed_store  # noqa: E402
from src.sentinel.store.seed import REMEDIES  # noqa: E402


REFERENCE_TIME = "2026-02-26T15:46:00+00:00"
FIXED_NOW = datetime(2026, 2, 26, 15, 46, tzinfo=timezone.utc)


# =============================================================================
# ENVIRONMENT SETUP
# =============================================================================

@pytest.fixture(autouse=True)
def mock_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("PROMETHEUS_METRICS", "false")
    monkeypatch.setenv("SENTINEL_PHASE_DELAY_MS", "0")
    monkeypatch.setenv("SENTINEL_REFERENCE_TIME", REFERENCE_TIME)


@pytest.fixture
def fixed_clock():
    """Clock that always returns the reference time."""
    return lambda: FIXED_NOW


# =============================================================================
# RECORD BUILDERS
# =============================================================================

def make_account(
    customer_id: str = "CUST-T01",
    tier: str = "Professional",
    tier_limit: int = 100000,
    **overrides,
) -> CustomerAccount:
    """Build a CustomerAccount with sensible defaults."""
    values = dict(
        id=customer_id,
        name=f"Test Co {customer_id}",
        tier=tier,
        tier_limit=tier_limit,
        account_manager="Dana Lee",
        account_manager_handle="@dana.lee",
        sales_rep="Sam Ortiz",
        scenario="test",
    )
    values.update(overrides)
    return CustomerAccount(**values)


def make_usage(
    api_calls,
    customer_id: str = "CUST-T01",
    error_rate_5xx=0.5,
    error_rate_4xx=1.0,
    tier_limit: int = 100000,
):
    """Build one usage record per entry of api_calls, one day apart, oldest first."""
    count = len(api_calls)
    rates_5xx = error_rate_5xx if isinstance(error_rate_5xx, (list, tuple)) else [error_rate_5xx] * count
    rates_4xx = error_rate_4xx if isinstance(error_rate_4xx, (list, tuple)) else [error_rate_4xx] * count
    start = FIXED_NOW - timedelta(days=count - 1)
    records = []
    for i, calls in enumerate(api_calls):
        day = start + timedelta(days=i)
        records.append(UsageRecord.build(
            id=f"LOG-{customer_id}-{day.strftime('%Y%m%d')}",
            customer_id=customer_id,
            timestamp=day.isoformat(),
            api_calls=calls,
            error_rate_5xx=rates_5xx[i],
            error_rate_4xx=rates_4xx[i],
            active_features=["api-core"],
            tier_limit=tier_limit,
        ))
    return records


def make_ticket(
    index: int = 0,
    priority: str = "P3",
    sentiment: str = "neutral",
    status: str = "open",
    customer_id: str = "CUST-T01",
    subject: str = "Test ticket",
    category: str = "general",
) -> TicketRecord:
    """Build a TicketRecord."""
    return TicketRecord(
        id=f"TKT-{customer_id}-{1000 + index:04d}",
        customer_id=customer_id,
        created_at=FIXED_NOW.isoformat(),
        priority=priority,
        sentiment=sentiment,
        status=status,
        subject=subject,
        category=category,
    )


def make_store(account: CustomerAccount, usage=None, tickets=None, remedies=None) -> InMemoryTelemetryStore:
    """Single-customer store; remedies default to the seed corpus."""
    return InMemoryTelemetryStore(
        customers=[account],
        usage={account.id: usage or []},
        tickets={account.id: tickets or []},
        remedies=REMEDIES if remedies is None else remedies,
    )


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def seed_store():
    """Seed dataset store at the fixed reference time."""
    return create_seed_store(REFERENCE_TIME)


@pytest.fixture
def remedy_corpus():
    """The three-entry remedy corpus."""
    return list(REMEDIES)


@pytest.fixture
def critical_usage():
    """Collapsing usage with a 5xx spike (82000 -> 9800)."""
    return make_usage(
        [82000, 71000, 58000, 44000, 31000, 22000, 9800],
        error_rate_5xx=[1.2, 2.8, 5.9, 8.4, 11.2, 14.7, 18.3],
        error_rate_4xx=[2.1, 3.0, 4.5, 6.1, 7.8, 9.2, 10.5],
        tier_limit=500000,
    )


@pytest.fixture
def critical_tickets():
    """Open P1/P2 tickets, all negative."""
    return [
        make_ticket(0, "P1", "negative", "open", category="500-error"),
        make_ticket(1, "P1", "negative", "open", category="auth-failure"),
        make_ticket(2, "P2", "negative", "pending", category="500-error"),
        make_ticket(3, "P3", "negative", "open", category="quota"),
    ]


@pytest.fixture
def expansion_usage():
    """Steady growth up to 97.8% of a 100k tier."""
    return make_usage([78000, 82000, 86000, 89000, 92000, 95000, 97800])


@pytest.fixture
def sample_remedy():
    """Remedy with a single 500-error token."""
    return RemedyRecord(
        id="REM-TEST-0001",
        error_pattern="500-error + api-core",
        resolution="Restarted the gateway.",
        segment="Enterprise",
        resolve_hours=1.0,
        outcome="Resolved",
        base_similarity=0.5,
    )
