"""LearningService - who may watch which lessons, and how far they got."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tichnuta.learning.exceptions import CourseAccessDeniedError
from tichnuta.learning.models import LessonView, Viewer

if TYPE_CHECKING:
    from tichnuta.site_store import Course, Lesson, LessonProgress, SiteStore

logger = logging.getLogger(__name__)


class LearningService:
    """Gates lesson content and records lesson progress.

    A course's non-preview lessons are open to admins, to e-mail addresses
    the back office granted access to, and to users who completed a purchase
    of the course. Preview lessons are open to everyone.
    """

    def __init__(self, store: SiteStore) -> None:
        self._store = store

    def has_course_access(self, course_id: str, viewer: Viewer) -> bool:
        if viewer.is_admin:
            return True
        if viewer.email and self._store.is_email_allowed(course_id, viewer.email):
            return True
        return bool(
            viewer.user_id
            and self._store.get_completed_purchase(viewer.user_id, course_id) is not None
        )

    def list_lessons(self, course_id: str, viewer: Viewer) -> list[LessonView]:
        """A course's lessons in order, locked where the viewer has no access.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        self._store.get_course(course_id)
        lessons = self._store.list_lessons(course_id)
        access = self.has_course_access(course_id, viewer)
        progress: dict[str, LessonProgress] = {}
        if viewer.user_id:
            lesson_ids = [lesson.id for lesson in lessons]
            progress = self._store.get_lesson_progress(viewer.user_id, lesson_ids)
        return [
            LessonView(
                lesson=lesson,
                locked=not (access or lesson.is_preview),
                progress=progress.get(lesson.id),
            )
            for lesson in lessons
        ]

    def get_lesson(self, lesson_id: str, viewer: Viewer) -> Lesson:
        """Get a lesson the viewer may watch.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
            CourseAccessDeniedError: If it is not a preview and the viewer has no access.
        """
        lesson = self._store.get_lesson(lesson_id)
        if not lesson.is_preview and not self.has_course_access(lesson.course_id, viewer):
            logger.info("Lesson %s refused to %s", lesson_id, viewer.user_id or "anonymous")
            raise CourseAccessDeniedError(f"No access to course '{lesson.course_id}'")
        return lesson

    def save_progress(
        self,
        lesson_id: str,
        viewer: Viewer,
        completed: bool,
        watch_time_seconds: int | None = None,
    ) -> LessonProgress:
        """Record progress on a lesson the user may watch.

        Raises:
            ValueError: If the viewer is not signed in.
            LessonNotFoundError: If lesson doesn't exist.
            CourseAccessDeniedError: If the user may not watch it.
        """
        if not viewer.user_id:
            raise ValueError("Lesson progress needs a signed-in user")
        self.get_lesson(lesson_id, viewer)
        return self._store.save_lesson_progress(
            viewer.user_id, lesson_id, completed=completed, watch_time_seconds=watch_time_seconds
        )

    def my_courses(self, viewer: Viewer) -> list[Course]:
        """Active courses the viewer was granted or bought, in catalog order."""
        course_ids: list[str] = []
        if viewer.email:
            course_ids.extend(self._store.list_allowed_course_ids(viewer.email))
        if viewer.user_id:
            course_ids.extend(self._store.list_purchased_course_ids(viewer.user_id))
        return self._store.list_courses_by_ids(course_ids)
