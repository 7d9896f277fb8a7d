"""Data models for the lesson forum."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tichnuta.site_store import ForumReply, ForumThread, Profile


@dataclass
class Author:
    """Display details of a post's author."""

    display_name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_profile(cls, profile: Profile | None) -> Author:
        if profile is None:
            return cls()
        return cls(display_name=profile.display_name, avatar_url=profile.avatar_url)


@dataclass
class ThreadSummary:
    """A thread as listed under a lesson."""

    thread: ForumThread
    author: Author
    replies_count: int = 0


@dataclass
class ReplyView:
    """A reply with its author."""

    reply: ForumReply
    author: Author


@dataclass
class ThreadDetail:
    """A thread with its replies, oldest first."""

    thread: ForumThread
    author: Author
    replies: list[ReplyView] = field(default_factory=list)
