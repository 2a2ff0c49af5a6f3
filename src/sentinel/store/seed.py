"""
Seed Dataset
============

Synthetic demo data: five customer scenarios, seven days of usage each,
ticket templates per scenario, and the remedy corpus. All values are
fixed so every run over the seed store is reproducible.

Scenarios (scores under the default policy):
    critical   - dramatic decline + high 5xx, four open P1/P2 (5, at-risk)
    expansion  - steady growth approaching tier limit (100, expansion)
    at_risk    - moderate decline + some 5xx, two open P1/P2 (10, at-risk)
    healthy    - stable usage, slight growth (100, expansion)
    recovering - was declining, now stabilizing, one pending P2 (85, monitoring)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from src.core.config import settings
from src.sentinel.models import CustomerAccount, RemedyRecord, TicketRecord, UsageRecord


CUSTOMERS = [
    CustomerAccount("CUST-001", "Acme Corp", "Enterprise", 500000,
                    "Sarah Chen", "@sarah.chen", "Marcus Webb", "critical"),
    CustomerAccount("CUST-002", "Nexus Cloud", "Professional", 100000,
                    "James Okafor", "@james.okafor", "Lisa Park", "expansion"),
    CustomerAccount("CUST-003", "Prometheus AI", "Enterprise", 1000000,
                    "Riya Patel", "@riya.patel", "Tom Bradley", "at_risk"),
    CustomerAccount("CUST-004", "StratosBuild", "Starter", 20000,
                    "Nina Johansson", "@nina.johansson", "Alex Turner", "healthy"),
    CustomerAccount("CUST-005", "Vertex Systems", "Professional", 150000,
                    "Carlos Mendez", "@carlos.mendez", "Priya Sharma", "recovering"),
]

USAGE_PATTERNS = {
    "critical": {
        "api_calls": [82000, 71000, 58000, 44000, 31000, 22000, 9800],
        "error_rate_5xx": [1.2, 2.8, 5.9, 8.4, 11.2, 14.7, 18.3],
        "error_rate_4xx": [2.1, 3.0, 4.5, 6.1, 7.8, 9.2, 10.5],
        "features": ["api-core", "webhooks"],
    },
    "expansion": {
        "api_calls": [78000, 82000, 86000, 89000, 92000, 95000, 97800],
        "error_rate_5xx": [0.3, 0.2, 0.4, 0.3, 0.2, 0.3, 0.2],
        "error_rate_4xx": [0.8, 0.7, 0.9, 0.8, 0.7, 0.6, 0.5],
        "features": ["api-core", "analytics", "webhooks", "ml-inference", "batch-jobs"],
    },
    "at_risk": {
        "api_calls": [45000, 42000, 38000, 35000, 31000, 28000, 24000],
        "error_rate_5xx": [1.0, 2.1, 3.4, 4.8, 5.2, 6.1, 7.0],
        "error_rate_4xx": [1.5, 2.0, 2.8, 3.5, 4.0, 4.5, 5.0],
        "features": ["api-core", "analytics"],
    },
    "healthy": {
        "api_calls": [15200, 15800, 16100, 15900, 16300, 15700, 16000],
        "error_rate_5xx": [0.2, 0.3, 0.2, 0.4, 0.3, 0.2, 0.3],
        "error_rate_4xx": [0.6, 0.7, 0.5, 0.8, 0.6, 0.7, 0.6],
        "features": ["api-core", "analytics", "webhooks"],
    },
    "recovering": {
        "api_calls": [30000, 27000, 25000, 24500, 25100, 26000, 27200],
        "error_rate_5xx": [6.0, 5.2, 4.1, 3.0, 2.1, 1.8, 1.6],
        "error_rate_4xx": [4.0, 3.5, 3.0, 2.8, 2.5, 2.2, 2.0],
        "features": ["api-core", "webhooks"],
    },
}

# (priority, sentiment, status, subject, category)
TICKET_TEMPLATES = {
    "critical": [
        ("P1", "negative", "open", "Production API returning 503 - complete outage for 4+ hours", "500-error"),
        ("P1", "negative", "open", "Authentication tokens invalidated across all endpoints", "auth-failure"),
        ("P2", "negative", "pending", "Webhook delivery failures causing data pipeline collapse", "500-error"),
        ("P2", "negative", "open", "SLA breach imminent - escalating to executive team", "sla"),
        ("P3", "negative", "open", "Rate limit errors despite being under quota", "quota"),
    ],
    "expansion": [
        ("P3", "positive", "resolved", "Question about ML Inference batch limits for scale-up", "quota"),
        ("P4", "positive", "resolved", "Requesting enterprise tier pricing - usage near cap", "billing"),
    ],
    "at_risk": [
        ("P1", "negative", "open", "Intermittent 500 errors on analytics endpoints", "500-error"),
        ("P2", "negative", "open", "API latency spikes above 4000ms threshold", "performance"),
        ("P3", "neutral", "pending", "Documentation unclear for new auth flow changes", "docs"),
    ],
    "healthy": [
        ("P3", "neutral", "resolved", "Minor UI inconsistency in dashboard export", "ui"),
        ("P4", "positive", "resolved", "Feature request: CSV export pagination", "feature-req"),
    ],
    "recovering": [
        ("P2", "neutral", "pending", "Error rate improving but still above baseline", "500-error"),
        ("P3", "neutral", "pending", "Scheduled maintenance window needed for remediation validation", "maintenance"),
    ],
}

REMEDIES = [
    RemedyRecord(
        id="REM-2025-0442",
        error_pattern="500-error + api-core + auth-failure",
        resolution=(
            "Rotated API gateway certificates; updated OAuth token expiry policy to 24h. "
            "Re-provisioned load balancer health checks."
        ),
        segment="Enterprise",
        resolve_hours=2.5,
        outcome="Churn prevented - customer renewed 3-year contract",
        base_similarity=0.94,
    ),
    RemedyRecord(
        id="REM-2025-0391",
        error_pattern="500-error + webhooks + pipeline-failure",
        resolution=(
            "Identified misconfigured retry logic in webhook dispatcher. Deployed hotfix v2.14.3. "
            "Enabled dead-letter queue for zero data loss."
        ),
        segment="Enterprise",
        resolve_hours=1.8,
        outcome="NPS recovered from 3 to 9 within 30 days",
        base_similarity=0.87,
    ),
    RemedyRecord(
        id="REM-2024-1204",
        error_pattern="declining-api-calls + negative-sentiment + P1-ticket",
        resolution=(
            "Emergency account review call with C-suite. Offered 3-month credit. "
            "Dedicated SRE assigned for 30 days."
        ),
        segment="Enterprise",
        resolve_hours=4.0,
        outcome="Account stabilized; upsell to Enterprise+ 6 months later",
        base_similarity=0.81,
    ),
]


@dataclass
class SeedDataset:
    customers: List[CustomerAccount] = field(default_factory=list)
    usage: Dict[str, List[UsageRecord]] = field(default_factory=dict)
    tickets: Dict[str, List[TicketRecord]] = field(default_factory=dict)
    remedies: List[RemedyRecord] = field(default_factory=list)


def _build_usage(customer: CustomerAccount, today: datetime) -> List[UsageRecord]:
    pattern = USAGE_PATTERNS[customer.scenario]
    days = len(pattern["api_calls"])
    records = []
    for i, calls in enumerate(pattern["api_calls"]):
        day = today - timedelta(days=days - 1 - i)
        records.append(UsageRecord.build(
            id=f"LOG-{customer.id}-{day.strftime('%Y%m%d')}",
            customer_id=customer.id,
            timestamp=day.isoformat(),
            api_calls=calls,
            error_rate_5xx=pattern["error_rate_5xx"][i],
            error_rate_4xx=pattern["error_rate_4xx"][i],
            active_features=pattern["features"],
            tier_limit=customer.tier_limit,
        ))
    return records


def _build_tickets(customer: CustomerAccount, today: datetime) -> List[TicketRecord]:
    tickets = []
    for i, (priority, sentiment, status, subject, category) in enumerate(TICKET_TEMPLATES[customer.scenario]):
        created = today - timedelta(days=i % 7)
        tickets.append(TicketRecord(
            id=f"TKT-{customer.id}-{1000 + i:04d}",
            customer_id=customer.id,
            created_at=created.isoformat(),
            priority=priority,
            sentiment=sentiment,
            status=status,
            subject=subject,
            category=category,
            assignee=customer.account_manager,
        ))
    return tickets


def build_seed_dataset(reference_time: Optional[str] = None) -> SeedDataset:
    """Materialize the seed dataset relative to a fixed reference time."""
    today = datetime.fromisoformat(reference_time or settings.sentinel.reference_time)
    dataset = SeedDataset(customers=list(CUSTOMERS), remedies=list(REMEDIES))
    for customer in CUSTOMERS:
        dataset.usage[customer.id] = _build_usage(customer, today)
        dataset.tickets[customer.id] = _build_tickets(customer, today)
    return dataset
