"""Unit tests for ChatEventManager and events."""

import asyncio
import json
import threading
from datetime import UTC, datetime

import pytest

from tichnuta.chat import ChatEventManager, Event, EventType


@pytest.fixture
def event_manager() -> ChatEventManager:
    """Create a ChatEventManager instance."""
    return ChatEventManager()


def emit(manager: ChatEventManager, session_id: str, text: str = "שלום") -> None:
    manager.emit_message_created(
        message_id="m1",
        session_id=session_id,
        sender_type="user",
        message=text,
        created_at=datetime(2026, 1, 1, 12, 0, tzinfo=UTC),
    )


@pytest.mark.unit
class TestSubscribe:
    """Tests for subscribe and unsubscribe."""

    def test_subscribe(self, event_manager: ChatEventManager) -> None:
        subscriber = event_manager.subscribe("session_1_abcdefghi")

        assert subscriber.session_id == "session_1_abcdefghi"
        assert event_manager.subscriber_count == 1

    def test_unsubscribe(self, event_manager: ChatEventManager) -> None:
        subscriber = event_manager.subscribe()
        event_manager.unsubscribe(subscriber.id)
        event_manager.unsubscribe("nonexistent-id")

        assert event_manager.subscriber_count == 0


@pytest.mark.unit
class TestEmit:
    """Tests for emitting events."""

    def test_session_subscriber_gets_own_session_only(
        self, event_manager: ChatEventManager
    ) -> None:
        mine = event_manager.subscribe("s1")

        emit(event_manager, "s1")
        emit(event_manager, "s2")

        assert mine.queue.qsize() == 1
        event = mine.queue.get_nowait()
        assert event.event_type == EventType.MESSAGE_CREATED
        assert event.data["session_id"] == "s1"
        assert event.data["created_at"] == "2026-01-01T12:00:00+00:00"

    def test_back_office_subscriber_gets_every_session(
        self, event_manager: ChatEventManager
    ) -> None:
        everything = event_manager.subscribe()

        emit(event_manager, "s1")
        emit(event_manager, "s2")

        assert everything.queue.qsize() == 2

    @pytest.mark.asyncio
    async def test_emit_from_worker_thread(self, event_manager: ChatEventManager) -> None:
        """Events emitted off the loop arrive on the subscriber's queue."""
        subscriber = event_manager.subscribe("s1")

        worker = threading.Thread(target=emit, args=(event_manager, "s1"))
        worker.start()
        worker.join()

        event = await asyncio.wait_for(subscriber.queue.get(), timeout=1)
        assert event.data["message"] == "שלום"


@pytest.mark.unit
class TestEventFormat:
    """Tests for SSE formatting."""

    def test_to_sse(self) -> None:
        event = Event(EventType.MESSAGE_CREATED, {"message": "היי"}, session_id="s1")

        sse = event.to_sse()

        assert sse.startswith("event: message_created\n")
        assert sse.endswith("\n\n")
        payload = sse.split("data: ", 1)[1].strip()
        assert json.loads(payload) == {"message": "היי"}
        assert "היי" in sse

    def test_heartbeat(self, event_manager: ChatEventManager) -> None:
        heartbeat = event_manager.create_heartbeat_event()

        assert heartbeat.event_type == EventType.HEARTBEAT
        assert "timestamp" in heartbeat.data
