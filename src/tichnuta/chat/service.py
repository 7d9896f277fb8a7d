"""ChatService - the site's chat widget and its back-office side."""

from __future__ import annotations

import logging
import re
import secrets
import string
import time
from typing import TYPE_CHECKING

from tichnuta.chat.exceptions import EmptyMessageError, InvalidSessionError
from tichnuta.site_store import SenderType

if TYPE_CHECKING:
    from tichnuta.chat.events import ChatEventManager
    from tichnuta.site_store import ChatMessage, ChatSessionSummary, SiteStore

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "👋 שלום! איך אפשר לעזור לך היום?"
SESSION_ID_PATTERN = re.compile(r"^session_\d+_[0-9a-z]{9}$")
_BASE36 = string.digits + string.ascii_lowercase


def new_session_id() -> str:
    """Generate a widget session ID: ``session_{epoch_ms}_{9 base-36 chars}``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def check_session_id(session_id: str) -> str:
    """Return ``session_id`` if it has the widget's format.

    Raises:
        InvalidSessionError: Otherwise.
    """
    if not SESSION_ID_PATTERN.match(session_id):
        raise InvalidSessionError(f"Invalid chat session id: {session_id!r}")
    return session_id


class ChatService:
    """Stores chat messages and publishes them to live subscribers."""

    def __init__(self, store: SiteStore, events: ChatEventManager) -> None:
        self._store = store
        self._events = events

    def load_session(self, session_id: str) -> list[ChatMessage]:
        """Get a session's messages, oldest first.

        A session without messages is greeted with the welcome message, which
        is stored and returned like any other admin message.
        """
        check_session_id(session_id)
        messages = self._store.list_chat_messages(session_id)
        if messages:
            return messages
        welcome = self._post(session_id, WELCOME_MESSAGE, SenderType.ADMIN)
        return [welcome]

    def send_user_message(
        self,
        session_id: str,
        text: str,
        user_name: str | None = None,
        user_email: str | None = None,
    ) -> ChatMessage:
        """Post a visitor's message.

        Raises:
            EmptyMessageError: If the text is blank.
        """
        check_session_id(session_id)
        return self._post(session_id, text, SenderType.USER, user_name, user_email)

    def send_admin_reply(self, session_id: str, text: str) -> ChatMessage:
        """Post a reply from the back office.

        Raises:
            EmptyMessageError: If the text is blank.
        """
        check_session_id(session_id)
        return self._post(session_id, text, SenderType.ADMIN)

    def list_sessions(self) -> list[ChatSessionSummary]:
        """All sessions, most recently active first."""
        return self._store.list_chat_sessions()

    def _post(
        self,
        session_id: str,
        text: str,
        sender: SenderType,
        user_name: str | None = None,
        user_email: str | None = None,
    ) -> ChatMessage:
        text = text.strip()
        if not text:
            raise EmptyMessageError("Message must not be empty")
        message = self._store.add_chat_message(
            session_id, text, sender.value, user_name=user_name, user_email=user_email
        )
        self._events.emit_message_created(
            message_id=message.id,
            session_id=session_id,
            sender_type=message.sender_type,
            message=message.message,
            created_at=message.created_at,
        )
        logger.debug("Chat message %s posted to %s by %s", message.id, session_id, sender.value)
        return message
