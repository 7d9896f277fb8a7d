"""Lesson forum endpoints."""

from fastapi import APIRouter, status

from tichnuta.api.dependencies import (
    AdminOnly,
    CurrentUserDep,
    ForumServiceDep,
    IsAdminDep,
    SiteStoreDep,
)
from tichnuta.api.models import (
    APIResponse,
    AuthorResponse,
    ProfileUpdate,
    ReplyCreate,
    ReplyResponse,
    ThreadCreate,
    ThreadDetailResponse,
    ThreadModeration,
    ThreadResponse,
    ThreadUpdate,
    reply_to_response,
    thread_to_response,
)

router = APIRouter(tags=["forum"])


@router.put("/profile", response_model=APIResponse[AuthorResponse])
def update_profile(
    profile: ProfileUpdate, user_id: CurrentUserDep, store: SiteStoreDep
) -> APIResponse[AuthorResponse]:
    """Set the name and avatar shown on the user's posts."""
    saved = store.upsert_profile(user_id, profile.display_name, profile.avatar_url)
    return APIResponse(data=AuthorResponse.model_validate(saved))


@router.get("/lessons/{lesson_id}/threads", response_model=APIResponse[list[ThreadResponse]])
def list_threads(
    lesson_id: str, forum: ForumServiceDep, store: SiteStoreDep
) -> APIResponse[list[ThreadResponse]]:
    """List a lesson's threads, pinned first."""
    store.get_lesson(lesson_id)
    summaries = forum.list_threads(lesson_id)
    return APIResponse(
        data=[thread_to_response(s.thread, s.author, s.replies_count) for s in summaries]
    )


@router.post(
    "/lessons/{lesson_id}/threads",
    response_model=APIResponse[ThreadResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_thread(
    lesson_id: str, thread: ThreadCreate, user_id: CurrentUserDep, forum: ForumServiceDep
) -> APIResponse[ThreadResponse]:
    """Open a thread on a lesson."""
    created = forum.create_thread(lesson_id, user_id, thread.title, thread.body)
    return APIResponse(data=thread_to_response(created))


@router.get("/threads/{thread_id}", response_model=APIResponse[ThreadDetailResponse])
def get_thread(thread_id: str, forum: ForumServiceDep) -> APIResponse[ThreadDetailResponse]:
    """Get a thread with its replies."""
    detail = forum.get_thread(thread_id)
    return APIResponse(
        data=ThreadDetailResponse(
            thread=thread_to_response(detail.thread, detail.author, len(detail.replies)),
            replies=[reply_to_response(r.reply, r.author) for r in detail.replies],
        )
    )


@router.patch("/threads/{thread_id}", response_model=APIResponse[ThreadResponse])
def update_thread(
    thread_id: str,
    thread: ThreadUpdate,
    user_id: CurrentUserDep,
    is_admin: IsAdminDep,
    forum: ForumServiceDep,
) -> APIResponse[ThreadResponse]:
    """Edit a thread (author or admin)."""
    updated = forum.update_thread(thread_id, user_id, thread.title, thread.body, is_admin=is_admin)
    return APIResponse(data=thread_to_response(updated))


@router.delete("/threads/{thread_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_thread(
    thread_id: str, user_id: CurrentUserDep, is_admin: IsAdminDep, forum: ForumServiceDep
) -> None:
    """Delete a thread with its replies (author or admin)."""
    forum.delete_thread(thread_id, user_id, is_admin=is_admin)


@router.patch(
    "/threads/{thread_id}/moderation",
    response_model=APIResponse[ThreadResponse],
    dependencies=[AdminOnly],
)
def moderate_thread(
    thread_id: str, moderation: ThreadModeration, forum: ForumServiceDep
) -> APIResponse[ThreadResponse]:
    """Pin or lock a thread."""
    updated = forum.moderate_thread(
        thread_id, is_pinned=moderation.is_pinned, is_locked=moderation.is_locked
    )
    return APIResponse(data=thread_to_response(updated))


@router.post(
    "/threads/{thread_id}/replies",
    response_model=APIResponse[ReplyResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_reply(
    thread_id: str,
    reply: ReplyCreate,
    user_id: CurrentUserDep,
    is_admin: IsAdminDep,
    forum: ForumServiceDep,
) -> APIResponse[ReplyResponse]:
    """Reply to a thread. Locked threads accept replies from admins only."""
    created = forum.create_reply(thread_id, user_id, reply.body, is_admin=is_admin)
    return APIResponse(data=reply_to_response(created))


@router.patch("/replies/{reply_id}", response_model=APIResponse[ReplyResponse])
def update_reply(
    reply_id: str,
    reply: ReplyCreate,
    user_id: CurrentUserDep,
    is_admin: IsAdminDep,
    forum: ForumServiceDep,
) -> APIResponse[ReplyResponse]:
    """Edit a reply (author or admin)."""
    updated = forum.update_reply(reply_id, user_id, reply.body, is_admin=is_admin)
    return APIResponse(data=reply_to_response(updated))


@router.delete("/replies/{reply_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reply(
    reply_id: str, user_id: CurrentUserDep, is_admin: IsAdminDep, forum: ForumServiceDep
) -> None:
    """Delete a reply (author or admin)."""
    forum.delete_reply(reply_id, user_id, is_admin=is_admin)
