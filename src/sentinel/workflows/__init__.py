"""
Workflow Dispatcher
===================

Usage:
    from src.sentinel.workflows import WorkflowDispatcher

    dispatcher = WorkflowDispatcher(store)
    result = dispatcher.at_risk("CUST-001", 5, assessment.risk_factors, remedies)
"""

from src.sentinel.workflows.integrations import (
    ExternalArtifact,
    IntegrationGateway,
    MockIntegrationGateway,
)
from src.sentinel.workflows.dispatcher import (
    WorkflowDispatcher,
    WorkflowResult,
    AtRiskResult,
    ExpansionResult,
    MonitoringResult,
)

__all__ = [
    "ExternalArtifact",
    "IntegrationGateway",
    "MockIntegrationGateway",
    "WorkflowDispatcher",
    "WorkflowResult",
    "AtRiskResult",
    "ExpansionResult",
    "MonitoringResult",
]
