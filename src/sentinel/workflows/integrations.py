"""
Integration Gateway
===================

One method per external effect the workflows produce:
- open_incident_ticket: issue tracker ticket (Jira-shaped)
- send_notification: chat message to a channel and a person (Slack-shaped)
- create_opportunity: CRM opportunity (Salesforce-shaped)

MockIntegrationGateway synthesizes every artifact locally. Synthesized
artifacts carry synthetic=True and a mock:// URL so they can always be
told apart from a real provider response. Identifiers are derived from
the inputs with uuid5, so the same request yields the same ids.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


ARTIFACT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "mock://revenue-sentinel")


@dataclass(frozen=True)
class ExternalArtifact:
    """Record of one effect applied to an external system."""
    kind: str
    id: str
    provider: str
    url: str
    synthetic: bool = True
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.id,
            "provider": self.provider,
            "url": self.url,
            "synthetic": self.synthetic,
            **self.payload,
        }


@runtime_checkable
class IntegrationGateway(Protocol):
    """Interface shared by the mock gateway and real integrations."""

    def open_incident_ticket(
        self,
        key: str,
        title: str,
        description: str,
        priority: str,
        assignee: str,
        labels: List[str],
    ) -> ExternalArtifact:
        ...

    def send_notification(
        self,
        key: str,
        channel: str,
        recipient: str,
        text: str,
        fields: Dict[str, str],
    ) -> ExternalArtifact:
        ...

    def create_opportunity(
        self,
        key: str,
        name: str,
        account_id: str,
        owner: str,
        amount: int,
        probability: int,
        signals: List[str],
        close_in_days: int = 30,
    ) -> ExternalArtifact:
        ...


class MockIntegrationGateway:
    """Synthesizes issue tracker, chat and CRM artifacts without network calls."""

    provider_prefix = "mock"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def derive_id(*parts: Any) -> uuid.UUID:
        """Deterministic identifier for the given inputs."""
        return uuid.uuid5(ARTIFACT_NAMESPACE, "|".join(str(p) for p in parts))

    def open_incident_ticket(
        self,
        key: str,
        title: str,
        description: str,
        priority: str,
        assignee: str,
        labels: List[str],
    ) -> ExternalArtifact:
        ticket_number = self.derive_id("ticket", key).int % 9000 + 1000
        ticket_id = f"CSRE-{ticket_number}"
        logger.info(f"[Gateway] Synthesized incident ticket {ticket_id} ({priority}) for {assignee}")
        return ExternalArtifact(
            kind="incident_ticket",
            id=ticket_id,
            provider=f"{self.provider_prefix}-jira",
            url=f"mock://jira/browse/{ticket_id}",
            payload={
                "project": "Customer Success & Revenue Engineering",
                "type": "Churn Risk Incident",
                "priority": priority,
                "status": "Open",
                "created_at": self.clock().isoformat(),
                "title": title,
                "description": description,
                "labels": list(labels),
                "assignee": assignee,
            },
        )

    def send_notification(
        self,
        key: str,
        channel: str,
        recipient: str,
        text: str,
        fields: Dict[str, str],
    ) -> ExternalArtifact:
        message_id = f"MSG-{self.derive_id('notification', key).hex[:10].upper()}"
        logger.info(f"[Gateway] Synthesized notification {message_id} to {recipient} in {channel}")
        return ExternalArtifact(
            kind="notification",
            id=message_id,
            provider=f"{self.provider_prefix}-slack",
            url=f"mock://slack/{channel.lstrip('#')}/{message_id}",
            payload={
                "channel": channel,
                "dm_to": recipient,
                "sent_at": self.clock().isoformat(),
                "text": text,
                "fields": dict(fields),
            },
        )

    def create_opportunity(
        self,
        key: str,
        name: str,
        account_id: str,
        owner: str,
        amount: int,
        probability: int,
        signals: List[str],
        close_in_days: int = 30,
    ) -> ExternalArtifact:
        now = self.clock()
        opportunity_id = f"OPP-{self.derive_id('opportunity', key).hex[:8].upper()}"
        logger.info(f"[Gateway] Synthesized opportunity {opportunity_id} ({amount}) for {owner}")
        return ExternalArtifact(
            kind="opportunity",
            id=opportunity_id,
            provider=f"{self.provider_prefix}-salesforce",
            url=f"mock://crm/opportunities/{opportunity_id}",
            payload={
                "name": name,
                "stage": "Expansion - Customer-Led Signal",
                "close_date": (now + timedelta(days=close_in_days)).date().isoformat(),
                "amount": amount,
                "probability": probability,
                "account_id": account_id,
                "owner": owner,
                "created_at": now.isoformat(),
                "signals": list(signals),
            },
        )
