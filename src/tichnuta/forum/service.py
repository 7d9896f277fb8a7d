"""ForumService - per-lesson discussion threads and replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tichnuta.forum.exceptions import EmptyPostError, NotAuthorError, ThreadLockedError
from tichnuta.forum.models import Author, ReplyView, ThreadDetail, ThreadSummary

if TYPE_CHECKING:
    from tichnuta.site_store import ForumReply, ForumThread, SiteStore

logger = logging.getLogger(__name__)


def _require_text(**values: str) -> None:
    for name, value in values.items():
        if not value or not value.strip():
            raise EmptyPostError(f"{name} must not be empty")


class ForumService:
    """Thread and reply operations with author/admin permission checks.

    Any signed-in user may post. Authors may edit or delete their own posts;
    admins may edit or delete any post and pin or lock threads.
    """

    def __init__(self, store: SiteStore) -> None:
        self._store = store

    def list_threads(self, lesson_id: str) -> list[ThreadSummary]:
        """List a lesson's threads (pinned first, then newest) with reply counts and authors."""
        threads = self._store.list_threads(lesson_id)
        if not threads:
            return []
        counts = self._store.count_replies(t.id for t in threads)
        profiles = self._store.get_profiles(t.author_id for t in threads)
        return [
            ThreadSummary(
                thread=t,
                author=Author.from_profile(profiles.get(t.author_id)),
                replies_count=counts.get(t.id, 0),
            )
            for t in threads
        ]

    def get_thread(self, thread_id: str) -> ThreadDetail:
        """Get a thread with its replies.

        Raises:
            ThreadNotFoundError: If thread doesn't exist.
        """
        thread = self._store.get_thread(thread_id)
        replies = self._store.list_replies(thread_id)
        profiles = self._store.get_profiles([thread.author_id, *(r.author_id for r in replies)])
        return ThreadDetail(
            thread=thread,
            author=Author.from_profile(profiles.get(thread.author_id)),
            replies=[
                ReplyView(reply=r, author=Author.from_profile(profiles.get(r.author_id)))
                for r in replies
            ],
        )

    def create_thread(self, lesson_id: str, user_id: str, title: str, body: str) -> ForumThread:
        """Open a thread on a lesson.

        Raises:
            EmptyPostError: If title or body is blank.
            LessonNotFoundError: If lesson doesn't exist.
        """
        _require_text(title=title, body=body)
        thread = self._store.create_thread(lesson_id, user_id, title.strip(), body.strip())
        logger.info("Thread %s opened on lesson %s by %s", thread.id, lesson_id, user_id)
        return thread

    def update_thread(
        self, thread_id: str, user_id: str, title: str, body: str, is_admin: bool = False
    ) -> ForumThread:
        """Edit a thread's title and body.

        Raises:
            NotAuthorError: If the user neither wrote the thread nor is an admin.
        """
        _require_text(title=title, body=body)
        thread = self._store.get_thread(thread_id)
        self._check_author(thread.author_id, user_id, is_admin)
        return self._store.update_thread(thread_id, title=title.strip(), body=body.strip())

    def delete_thread(self, thread_id: str, user_id: str, is_admin: bool = False) -> None:
        """Delete a thread and all its replies.

        Raises:
            NotAuthorError: If the user neither wrote the thread nor is an admin.
        """
        thread = self._store.get_thread(thread_id)
        self._check_author(thread.author_id, user_id, is_admin)
        self._store.delete_thread(thread_id)
        logger.info("Thread %s deleted by %s", thread_id, user_id)

    def moderate_thread(
        self, thread_id: str, is_pinned: bool | None = None, is_locked: bool | None = None
    ) -> ForumThread:
        """Pin/unpin or lock/unlock a thread (admins only; checked by the caller)."""
        return self._store.update_thread(thread_id, is_pinned=is_pinned, is_locked=is_locked)

    def create_reply(
        self, thread_id: str, user_id: str, body: str, is_admin: bool = False
    ) -> ForumReply:
        """Reply to a thread.

        Raises:
            EmptyPostError: If body is blank.
            ThreadLockedError: If the thread is locked and the user is not an admin.
        """
        _require_text(body=body)
        thread = self._store.get_thread(thread_id)
        if thread.is_locked and not is_admin:
            raise ThreadLockedError(f"Thread '{thread_id}' is locked")
        return self._store.create_reply(thread_id, user_id, body.strip())

    def update_reply(
        self, reply_id: str, user_id: str, body: str, is_admin: bool = False
    ) -> ForumReply:
        """Edit a reply.

        Raises:
            NotAuthorError: If the user neither wrote the reply nor is an admin.
        """
        _require_text(body=body)
        reply = self._store.get_reply(reply_id)
        self._check_author(reply.author_id, user_id, is_admin)
        return self._store.update_reply(reply_id, body.strip())

    def delete_reply(self, reply_id: str, user_id: str, is_admin: bool = False) -> None:
        """Delete a reply.

        Raises:
            NotAuthorError: If the user neither wrote the reply nor is an admin.
        """
        reply = self._store.get_reply(reply_id)
        self._check_author(reply.author_id, user_id, is_admin)
        self._store.delete_reply(reply_id)

    @staticmethod
    def _check_author(author_id: str, user_id: str, is_admin: bool) -> None:
        if not is_admin and author_id != user_id:
            raise NotAuthorError("Only the author or an admin may change this post")
