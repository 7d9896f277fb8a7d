"""Forum - discussion threads attached to lessons."""

from tichnuta.forum.exceptions import (
    EmptyPostError,
    ForumError,
    NotAuthorError,
    ThreadLockedError,
)
from tichnuta.forum.models import Author, ReplyView, ThreadDetail, ThreadSummary
from tichnuta.forum.service import ForumService

__all__ = [
    "Author",
    "EmptyPostError",
    "ForumError",
    "ForumService",
    "NotAuthorError",
    "ReplyView",
    "ThreadDetail",
    "ThreadLockedError",
    "ThreadSummary",
]
