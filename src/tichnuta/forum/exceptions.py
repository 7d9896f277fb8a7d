"""Custom exceptions for the lesson forum."""


class ForumError(Exception):
    """Base exception for forum errors."""


class ThreadLockedError(ForumError):
    """Thread is locked and accepts no new replies."""


class NotAuthorError(ForumError):
    """User may only change posts they wrote."""


class EmptyPostError(ForumError):
    """Title or body is empty."""
