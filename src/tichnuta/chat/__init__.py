"""Chat - the site's chat widget with realtime delivery to the back office."""

from tichnuta.chat.events import ChatEventManager, Event, EventType, Subscriber
from tichnuta.chat.exceptions import ChatError, EmptyMessageError, InvalidSessionError
from tichnuta.chat.service import (
    WELCOME_MESSAGE,
    ChatService,
    check_session_id,
    new_session_id,
)

__all__ = [
    "WELCOME_MESSAGE",
    "ChatError",
    "ChatEventManager",
    "ChatService",
    "EmptyMessageError",
    "Event",
    "EventType",
    "InvalidSessionError",
    "Subscriber",
    "check_session_id",
    "new_session_id",
]
