"""
Pipeline Events
===============

Typed progress events and the sinks that receive them.

Event kinds, in the order a run produces them:
    connected -> (phase_start -> tool_result* -> phase_complete | phase_skip)*
    -> pipeline_complete | error

Sinks:
- ListEventSink: collects events in memory (headless runs, tests)
- EventChannel: asyncio.Queue handing events to one streaming subscriber

SSE framing follows the standard `id:` / `event:` / `data:` layout with the
event sequence number as id.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class EventKind:
    CONNECTED = "connected"
    PHASE_START = "phase_start"
    PHASE_COMPLETE = "phase_complete"
    PHASE_SKIP = "phase_skip"
    TOOL_RESULT = "tool_result"
    PIPELINE_COMPLETE = "pipeline_complete"
    ERROR = "error"

    TERMINAL = frozenset({PIPELINE_COMPLETE, ERROR})
    ALL = (CONNECTED, PHASE_START, PHASE_COMPLETE, PHASE_SKIP, TOOL_RESULT, PIPELINE_COMPLETE, ERROR)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PipelineEvent:
    """One progress event of a pipeline run."""
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=_utc_now)
    sequence: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.kind in EventKind.TERMINAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "sequence": self.sequence,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }

    def to_sse(self) -> str:
        """Format event as an SSE message."""
        lines = [
            f"id: {self.sequence}",
            f"event: {self.kind}",
            f"data: {json.dumps(self.to_dict(), default=str)}",
        ]
        return "\n".join(lines) + "\n\n"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineEvent":
        """Rebuild an event from its wire shape; unknown keys are ignored."""
        return cls(
            kind=data["kind"],
            payload=dict(data.get("payload") or {}),
            timestamp=data.get("timestamp") or _utc_now(),
            sequence=int(data.get("sequence", 0)),
        )


# =============================================================================
# SINKS
# =============================================================================

@runtime_checkable
class EventSink(Protocol):
    """Receiver of pipeline events for a single run."""

    @property
    def closed(self) -> bool:
        ...

    async def emit(self, event: PipelineEvent) -> bool:
        """Deliver an event; returns False if the sink no longer accepts events."""
        ...

    async def close(self) -> None:
        ...


class ListEventSink:
    """Collects events in a list."""

    def __init__(self):
        self.events: List[PipelineEvent] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: PipelineEvent) -> bool:
        if self._closed:
            return False
        self.events.append(event)
        return True

    async def close(self) -> None:
        self._closed = True

    @property
    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: str) -> List[PipelineEvent]:
        return [event for event in self.events if event.kind == kind]


class EventChannel:
    """
    Single-subscriber queue between a running pipeline and a stream consumer.

    Closing the channel (from either side) stops further emits and ends
    the consumer's iteration once queued events are drained.
    """

    _END = object()

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: PipelineEvent) -> bool:
        if self._closed:
            logger.debug(f"Dropped {event.kind} event #{event.sequence}: channel closed")
            return False
        await self._queue.put(event)
        return True

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(self._END)

    async def get(self) -> Optional[PipelineEvent]:
        """Next event, or None once the channel is closed and drained."""
        item = await self._queue.get()
        if item is self._END:
            return None
        return item

    def __aiter__(self) -> AsyncIterator[PipelineEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[PipelineEvent]:
        while True:
            event = await self.get()
            if event is None:
                break
            yield event
