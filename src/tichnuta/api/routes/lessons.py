"""Lesson endpoints."""

from fastapi import APIRouter, status

from tichnuta.api.dependencies import (
    AdminOnly,
    CurrentUserDep,
    LearningServiceDep,
    SiteStoreDep,
    ViewerDep,
)
from tichnuta.api.models import (
    APIResponse,
    LessonCreate,
    LessonProgressResponse,
    LessonProgressUpdate,
    LessonResponse,
    LessonUpdate,
)

router = APIRouter(tags=["lessons"])


@router.post(
    "/courses/{course_id}/lessons",
    response_model=APIResponse[LessonResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def add_lesson(
    course_id: str, lesson: LessonCreate, store: SiteStoreDep
) -> APIResponse[LessonResponse]:
    """Add a lesson to a course."""
    fields = lesson.model_dump()
    title = fields.pop("title")
    created = store.add_lesson(course_id, title, **fields)
    return APIResponse(data=LessonResponse.model_validate(created))


@router.get("/lessons/{lesson_id}", response_model=APIResponse[LessonResponse])
def get_lesson(
    lesson_id: str, learning: LearningServiceDep, viewer: ViewerDep
) -> APIResponse[LessonResponse]:
    """Get a lesson by ID.

    Non-preview lessons are served only to admins, e-mail addresses granted
    access to the course and users who bought it.
    """
    lesson = learning.get_lesson(lesson_id, viewer)
    return APIResponse(data=LessonResponse.model_validate(lesson))


@router.put(
    "/lessons/{lesson_id}/progress", response_model=APIResponse[LessonProgressResponse]
)
def save_progress(
    lesson_id: str,
    progress: LessonProgressUpdate,
    _user_id: CurrentUserDep,
    learning: LearningServiceDep,
    viewer: ViewerDep,
) -> APIResponse[LessonProgressResponse]:
    """Record the current user's progress on a lesson."""
    saved = learning.save_progress(
        lesson_id, viewer, progress.completed, progress.watch_time_seconds
    )
    return APIResponse(data=LessonProgressResponse.model_validate(saved))


@router.patch(
    "/lessons/{lesson_id}",
    response_model=APIResponse[LessonResponse],
    dependencies=[AdminOnly],
)
def update_lesson(
    lesson_id: str, lesson: LessonUpdate, store: SiteStoreDep
) -> APIResponse[LessonResponse]:
    """Update a lesson (partial update)."""
    updated = store.update_lesson(lesson_id, **lesson.model_dump(exclude_unset=True))
    return APIResponse(data=LessonResponse.model_validate(updated))


@router.delete(
    "/lessons/{lesson_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AdminOnly],
)
def delete_lesson(lesson_id: str, store: SiteStoreDep) -> None:
    """Delete a lesson and its forum threads."""
    store.delete_lesson(lesson_id)
