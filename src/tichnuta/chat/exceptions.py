"""Custom exceptions for the chat widget."""


class ChatError(Exception):
    """Base exception for chat errors."""


class EmptyMessageError(ChatError):
    """Message text is empty after trimming."""


class InvalidSessionError(ChatError):
    """Session ID is not in the widget's format."""
