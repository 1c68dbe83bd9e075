"""
Sync Event Publisher

Server-Sent Events (SSE) for mirror observability.
Every mirror attempt publishes an event to the acting user's stream,
so sync debt is visible without blocking the write that caused it.
"""
import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, Optional, AsyncGenerator
from dataclasses import dataclass, asdict
from enum import Enum

logger = logging.getLogger(__name__)


class SyncEventType(str, Enum):
    """Sync event types."""
    MIRROR_SYNCED = "mirror_synced"
    MIRROR_FAILED = "mirror_failed"
    OUTBOX_RECORDED = "outbox_recorded"
    OUTBOX_DELIVERED = "outbox_delivered"
    OUTBOX_ABANDONED = "outbox_abandoned"


@dataclass
class SyncEvent:
    """A sync event to be streamed to the client."""
    event_type: str
    message: str
    resource: str
    entity_id: Optional[str] = None
    timestamp: str = None
    data: Optional[Dict] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.utcnow().isoformat()

    def to_sse(self) -> str:
        """Format as SSE data line."""
        return f"data: {json.dumps(asdict(self))}\n\n"


class EventPublisher:
    """
    Manages per-user SSE event queues.

    Usage:
        publisher = get_event_publisher()

        # In API endpoint
        async for event in publisher.subscribe(user_id):
            yield event

        # In the mirror writer
        await publisher.publish(user_id, SyncEventType.MIRROR_FAILED, "...", resource="todos")
    """

    def __init__(self):
        # user_id -> list of subscriber queues
        self._subscribers: Dict[str, list] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, user_id: str) -> AsyncGenerator[str, None]:
        """Subscribe to a user's sync events. Yields SSE-formatted strings."""
        queue = asyncio.Queue()

        async with self._lock:
            self._subscribers.setdefault(user_id, []).append(queue)

        try:
            yield f"data: {json.dumps({'event_type': 'connected', 'message': 'Connected to sync stream'})}\n\n"

            while True:
                event = await queue.get()
                if event is None:  # Shutdown signal
                    break
                yield event.to_sse()
        finally:
            async with self._lock:
                if user_id in self._subscribers:
                    self._subscribers[user_id].remove(queue)
                    if not self._subscribers[user_id]:
                        del self._subscribers[user_id]

    async def publish(
        self,
        user_id: str,
        event_type: SyncEventType,
        message: str,
        resource: str,
        entity_id: Optional[str] = None,
        data: Optional[Dict] = None,
    ) -> int:
        """Publish an event to all of a user's subscribers. Returns the subscriber count."""
        event = SyncEvent(
            event_type=event_type.value,
            message=message,
            resource=resource,
            entity_id=entity_id,
            data=data,
        )

        async with self._lock:
            subscribers = list(self._subscribers.get(user_id, []))
        for queue in subscribers:
            queue.put_nowait(event)

        logger.debug(f"Published sync event to {len(subscribers)} subscribers: {message}")
        return len(subscribers)

    async def close_all(self, user_id: str):
        """Close all subscriber connections for a user."""
        async with self._lock:
            for queue in self._subscribers.get(user_id, []):
                queue.put_nowait(None)


# Global publisher instance
_publisher: Optional[EventPublisher] = None


def get_event_publisher() -> EventPublisher:
    """Get or create the global event publisher."""
    global _publisher
    if _publisher is None:
        _publisher = EventPublisher()
    return _publisher
