"""Chat widget endpoints, including live delivery over Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, status
from fastapi.responses import StreamingResponse

from tichnuta.api.dependencies import AdminOnly, ChatEventsDep, ChatServiceDep
from tichnuta.api.models import (
    APIResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    ChatSessionCreated,
    ChatSessionResponse,
)
from tichnuta.chat import check_session_id, new_session_id

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from tichnuta.chat import ChatEventManager, Subscriber

router = APIRouter(prefix="/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def _stream(events: ChatEventManager, subscriber: Subscriber) -> StreamingResponse:
    async def generate() -> AsyncGenerator[str, None]:
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=events._heartbeat_interval
                    )
                    yield event.to_sse()
                except TimeoutError:
                    yield events.create_heartbeat_event().to_sse()
        except asyncio.CancelledError:
            # Client disconnected
            pass
        finally:
            events.unsubscribe(subscriber.id)

    return StreamingResponse(generate(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post(
    "/sessions",
    response_model=APIResponse[ChatSessionCreated],
    status_code=status.HTTP_201_CREATED,
)
def create_session() -> APIResponse[ChatSessionCreated]:
    """Start a new widget session."""
    return APIResponse(data=ChatSessionCreated(session_id=new_session_id()))


@router.get(
    "/sessions",
    response_model=APIResponse[list[ChatSessionResponse]],
    dependencies=[AdminOnly],
)
def list_sessions(chat: ChatServiceDep) -> APIResponse[list[ChatSessionResponse]]:
    """List chat sessions, most recently active first."""
    sessions = chat.list_sessions()
    return APIResponse(data=[ChatSessionResponse.model_validate(s) for s in sessions])


@router.get(
    "/sessions/{session_id}/messages",
    response_model=APIResponse[list[ChatMessageResponse]],
)
def load_session(session_id: str, chat: ChatServiceDep) -> APIResponse[list[ChatMessageResponse]]:
    """Get a session's messages. A new session starts with the welcome message."""
    messages = chat.load_session(session_id)
    return APIResponse(data=[ChatMessageResponse.model_validate(m) for m in messages])


@router.post(
    "/sessions/{session_id}/messages",
    response_model=APIResponse[ChatMessageResponse],
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    session_id: str, body: ChatMessageCreate, chat: ChatServiceDep
) -> APIResponse[ChatMessageResponse]:
    """Send a visitor message."""
    message = chat.send_user_message(
        session_id, body.message, user_name=body.user_name, user_email=body.user_email
    )
    return APIResponse(data=ChatMessageResponse.model_validate(message))


@router.post(
    "/sessions/{session_id}/replies",
    response_model=APIResponse[ChatMessageResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def send_reply(
    session_id: str, body: ChatMessageCreate, chat: ChatServiceDep
) -> APIResponse[ChatMessageResponse]:
    """Reply to a session from the back office."""
    message = chat.send_admin_reply(session_id, body.message)
    return APIResponse(data=ChatMessageResponse.model_validate(message))


@router.get("/sessions/{session_id}/stream")
async def session_stream(session_id: str, events: ChatEventsDep) -> StreamingResponse:
    """Live messages of one session.

    A heartbeat is sent every 30 seconds to keep the connection alive.
    """
    check_session_id(session_id)
    return _stream(events, events.subscribe(session_id))


@router.get("/stream", dependencies=[AdminOnly])
async def admin_stream(events: ChatEventsDep) -> StreamingResponse:
    """Live messages of every session, for the back office."""
    return _stream(events, events.subscribe())
