"""
Analysis Router
===============

Handles the decision pipeline endpoints:
- GET /api/customers - Account directory for the dashboard picker
- GET /api/analyze/{customer_id} - Run the pipeline, streamed as Server-Sent Events

The stream is one `text/event-stream` response per run. An unknown
customer is rejected with a 404 JSON body before any event is written.
If the client disconnects, the run task is cancelled and its channel closed.
"""

import asyncio
import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from src.api.dependencies import get_orchestrator, get_telemetry_store
from src.api.errors import NotFoundError
from src.sentinel.pipeline import EventChannel, PipelineOrchestrator
from src.sentinel.store import TelemetryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class CustomerSummary(BaseModel):
    """Account directory entry."""
    id: str
    name: str
    tier: str
    tier_limit: int
    account_manager: str
    scenario: str


# =============================================================================
# STREAMING
# =============================================================================

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


async def _event_stream(orchestrator: PipelineOrchestrator, customer_id: str) -> AsyncIterator[str]:
    """Run the pipeline in a task and relay its events as SSE frames."""
    channel = EventChannel()
    task = asyncio.create_task(orchestrator.run(customer_id, channel))
    try:
        async for event in channel:
            yield event.to_sse()
    finally:
        if not task.done():
            logger.info(f"SSE client for {customer_id} disconnected, cancelling run")
            task.cancel()
        await channel.close()


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/customers", response_model=List[CustomerSummary])
async def list_customers(store: TelemetryStore = Depends(get_telemetry_store)):
    """List every customer that can be analyzed."""
    accounts = await asyncio.to_thread(store.list_customers)
    return [CustomerSummary(**account.to_dict()) for account in accounts]


@router.get("/analyze/{customer_id}")
async def analyze(
    customer_id: str,
    store: TelemetryStore = Depends(get_telemetry_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """
    Stream a pipeline run for one customer.

    Events: connected, phase_start, tool_result, phase_complete,
    phase_skip, then exactly one pipeline_complete or error.
    """
    account = await asyncio.to_thread(store.get_customer, customer_id)
    if account is None:
        raise NotFoundError(f"Customer {customer_id} not found", customer_id=customer_id)

    logger.info(f"Starting analysis stream for {customer_id} ({account.name})")
    return StreamingResponse(
        _event_stream(orchestrator, customer_id),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
