"""Realtime fan-out of chat messages over Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class EventType(str, Enum):
    """Types of events that can be emitted."""

    MESSAGE_CREATED = "message_created"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    session_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        payload = json.dumps(self.data, ensure_ascii=False)
        return f"event: {self.event_type.value}\ndata: {payload}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    session_id: str | None = None  # None means every session (back office)
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls, session_id: str | None = None) -> Subscriber:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        return cls(id=str(uuid4()), queue=asyncio.Queue(), session_id=session_id, loop=loop)

    def wants(self, event: Event) -> bool:
        return self.session_id is None or self.session_id == event.session_id

    def deliver(self, event: Event) -> None:
        """Put an event on the queue, from the subscriber's loop or from a worker thread."""
        if self.loop is None or self.loop.is_closed():
            self.queue.put_nowait(event)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self.loop:
            self.queue.put_nowait(event)
        else:
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)


@dataclass
class ChatEventManager:
    """Delivers new chat messages to the widget and the back office."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    _heartbeat_interval: int = 30  # seconds

    def subscribe(self, session_id: str | None = None) -> Subscriber:
        """Subscribe to one chat session, or to all sessions when ``session_id`` is None."""
        subscriber = Subscriber.create(session_id)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        self._subscribers.pop(subscriber_id, None)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, event: Event) -> None:
        """Queue an event for every matching subscriber."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                subscriber.deliver(event)

    def emit_message_created(
        self,
        message_id: str,
        session_id: str,
        sender_type: str,
        message: str,
        created_at: datetime,
    ) -> None:
        """Emit a message_created event."""
        self.emit(
            Event(
                event_type=EventType.MESSAGE_CREATED,
                session_id=session_id,
                data={
                    "id": message_id,
                    "session_id": session_id,
                    "sender_type": sender_type,
                    "message": message,
                    "created_at": created_at.isoformat(),
                },
            )
        )

    def create_heartbeat_event(self) -> Event:
        return Event(
            event_type=EventType.HEARTBEAT,
            data={"timestamp": datetime.now(UTC).isoformat()},
        )
