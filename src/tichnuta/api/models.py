"""Pydantic models for REST API."""

from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class ValidationErrorResponse(BaseModel):
    """Response for a rejected registration form."""

    data: None = None
    error: str = "Validation failed"
    fields: dict[str, str]


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    title: str = Field(..., min_length=1, max_length=200)
    subtitle: str = Field(default="", max_length=255)
    description: str = ""
    slug: str | None = Field(default=None, max_length=200, pattern=r"^[a-z0-9][a-z0-9\-]*$")
    level: str = Field(default="", max_length=50)
    duration: str = Field(default="", max_length=100)
    group_size: str = Field(default="", max_length=100)
    price_text: str = Field(default="", max_length=100)
    price_number: int = Field(default=0, ge=0)
    icon: str = Field(default="Code2", max_length=50)
    color: str = Field(default="primary", max_length=50)
    features: list[str] = Field(default_factory=list)
    locations: list[str] | None = None
    times: list[str] | None = None
    active: bool = True
    sort_order: int = 0
    school_id: str | None = None


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update).

    An explicit null clears slug, fallback lists or school; it is rejected
    for every other field.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    subtitle: str | None = Field(default=None, max_length=255)
    description: str | None = None
    slug: str | None = Field(default=None, max_length=200, pattern=r"^[a-z0-9][a-z0-9\-]*$")
    level: str | None = Field(default=None, max_length=50)
    duration: str | None = Field(default=None, max_length=100)
    group_size: str | None = Field(default=None, max_length=100)
    price_text: str | None = Field(default=None, max_length=100)
    price_number: int | None = Field(default=None, ge=0)
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    features: list[str] | None = None
    locations: list[str] | None = None
    times: list[str] | None = None
    active: bool | None = None
    sort_order: int | None = None
    school_id: str | None = None


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    subtitle: str
    description: str
    slug: str | None
    level: str
    duration: str
    group_size: str
    price_text: str
    price_number: int
    icon: str
    color: str
    features: list[str]
    locations: list[str] | None
    times: list[str] | None
    active: bool
    sort_order: int
    school_id: str | None
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


# Schedule / period models


class ScheduleCreate(BaseModel):
    """Request model for adding a schedule slot."""

    location: str = Field(..., min_length=1, max_length=255)
    day_of_week: str = Field(..., min_length=1, max_length=50)
    start_time: str = Field(..., min_length=1, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)


class ScheduleUpdate(BaseModel):
    """Request model for updating a schedule slot. An empty end_time clears it."""

    location: str | None = Field(default=None, min_length=1, max_length=255)
    day_of_week: str | None = Field(default=None, min_length=1, max_length=50)
    start_time: str | None = Field(default=None, min_length=1, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)


class ScheduleResponse(BaseModel):
    """Response model for a schedule slot."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    location: str
    day_of_week: str
    start_time: str
    end_time: str | None


class PeriodCreate(BaseModel):
    """Request model for adding a learning period."""

    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    is_active: bool = True


class PeriodUpdate(BaseModel):
    """Request model for updating a learning period."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool | None = None


class PeriodResponse(BaseModel):
    """Response model for a learning period."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    name: str
    start_date: date
    end_date: date
    is_active: bool


# Lesson models


class LessonCreate(BaseModel):
    """Request model for adding a lesson."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    video_url: str | None = Field(default=None, max_length=500)
    slides_url: str | None = Field(default=None, max_length=500)
    order_index: int = Field(default=0, ge=0)
    is_preview: bool = False


class LessonUpdate(BaseModel):
    """Request model for updating a lesson (partial update)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    video_url: str | None = Field(default=None, max_length=500)
    slides_url: str | None = Field(default=None, max_length=500)
    order_index: int | None = Field(default=None, ge=0)
    is_preview: bool | None = None


class LessonProgressResponse(BaseModel):
    """A user's progress on a lesson."""

    model_config = ConfigDict(from_attributes=True)

    completed: bool
    completed_at: datetime | None
    watch_time_seconds: int | None


class LessonProgressUpdate(BaseModel):
    """Request model for saving lesson progress."""

    completed: bool
    watch_time_seconds: int | None = Field(default=None, ge=0)


class LessonResponse(BaseModel):
    """Response model for a lesson.

    ``video_url`` and ``slides_url`` are withheld from locked lessons.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    description: str | None
    video_url: str | None
    slides_url: str | None
    order_index: int
    is_preview: bool
    locked: bool = False
    progress: LessonProgressResponse | None = None


def lesson_view_to_response(view: Any) -> LessonResponse:
    """Convert a LessonView to LessonResponse."""
    response = LessonResponse.model_validate(view.lesson)
    response.locked = view.locked
    if view.locked:
        response.video_url = None
        response.slides_url = None
    if view.progress is not None:
        response.progress = LessonProgressResponse.model_validate(view.progress)
    return response


# Variant models


class VariantCreate(BaseModel):
    """Request model for adding a course variant."""

    name: str = Field(..., min_length=1, max_length=255)
    gender: str = Field(..., min_length=1, max_length=20)
    location: str = Field(..., min_length=1, max_length=255)
    day_of_week: str = Field(..., min_length=1, max_length=50)
    start_time: str = Field(..., min_length=1, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)
    min_grade: str | None = Field(default=None, max_length=20)
    max_grade: str | None = Field(default=None, max_length=20)
    learning_period: str | None = Field(default=None, max_length=255)
    is_active: bool = True
    sort_order: int = 0


class VariantUpdate(BaseModel):
    """Request model for updating a course variant (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    gender: str | None = Field(default=None, min_length=1, max_length=20)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    day_of_week: str | None = Field(default=None, min_length=1, max_length=50)
    start_time: str | None = Field(default=None, min_length=1, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)
    min_grade: str | None = Field(default=None, max_length=20)
    max_grade: str | None = Field(default=None, max_length=20)
    learning_period: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None
    sort_order: int | None = None


class VariantResponse(BaseModel):
    """Response model for a course variant."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    name: str
    gender: str
    location: str
    day_of_week: str
    start_time: str
    end_time: str | None
    min_grade: str | None
    max_grade: str | None
    learning_period: str | None
    is_active: bool
    sort_order: int


# Course access models


class AllowedEmailsCreate(BaseModel):
    """Request model for granting course access to e-mail addresses."""

    emails: list[EmailStr] = Field(..., min_length=1, max_length=500)


class AllowedEmailResponse(BaseModel):
    """Response model for one address with course access."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    email: str
    created_at: datetime


class AllowedEmailsResult(BaseModel):
    """Result of a grant: new entries and addresses that already had access."""

    added: list[AllowedEmailResponse]
    skipped: list[str]


# School models


class SchoolCreate(BaseModel):
    """Request model for adding a partner school."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    color: str = Field(default="bg-primary", max_length=50)
    icon: str = Field(default="GraduationCap", max_length=50)
    active: bool = True
    sort_order: int = 0


class SchoolUpdate(BaseModel):
    """Request model for updating a partner school (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    color: str | None = Field(default=None, max_length=50)
    icon: str | None = Field(default=None, max_length=50)
    active: bool | None = None
    sort_order: int | None = None


class SchoolResponse(BaseModel):
    """Response model for a partner school."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    color: str
    icon: str
    active: bool
    sort_order: int


# Registration models


class RegistrationOptionsResponse(BaseModel):
    """Option lists for the registration form of one course."""

    course: str
    location: str
    time: str
    gender: str
    learning_period: str
    locations: list[str]
    time_slots: list[str]
    periods: list[str]
    location_placeholder: str | None
    time_placeholder: str | None
    period_placeholder: str | None
    time_enabled: bool


class RegistrationRequest(BaseModel):
    """Raw registration form values. Validation happens in the submission handler."""

    name: str = ""
    phone: str = ""
    email: str = ""
    course: str = ""
    location: str = ""
    grade: str = ""
    time: str = ""
    gender: str = ""
    learning_period: str = ""
    message: str = ""


class RegistrationCreated(BaseModel):
    """Response after a registration was stored."""

    id: str
    title: str
    description: str


class RegistrationResponse(BaseModel):
    """Response model for a stored registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    email: str
    course: str
    location: str | None
    grade: str | None
    time: str | None
    gender: str | None
    learning_period: str | None
    message: str | None
    school_name: str | None
    status: str
    created_at: datetime
    updated_at: datetime


class RegistrationStatusUpdate(BaseModel):
    """Request model for changing a registration's status."""

    status: str = Field(..., pattern=r"^(new|contacted|closed)$")


# Forum models


class AuthorResponse(BaseModel):
    """Author details of a forum post."""

    model_config = ConfigDict(from_attributes=True)

    display_name: str | None
    avatar_url: str | None


class ProfileUpdate(BaseModel):
    """Request model for the signed-in user's forum profile."""

    display_name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=500)


class ThreadCreate(BaseModel):
    """Request model for opening a thread."""

    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1, max_length=10000)


class ThreadUpdate(BaseModel):
    """Request model for editing a thread."""

    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1, max_length=10000)


class ThreadModeration(BaseModel):
    """Request model for pinning or locking a thread."""

    is_pinned: bool | None = None
    is_locked: bool | None = None


class ThreadResponse(BaseModel):
    """Response model for a thread."""

    id: str
    lesson_id: str
    author_id: str
    title: str
    body: str
    is_pinned: bool
    is_locked: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorResponse | None = None
    replies_count: int = 0


class ReplyCreate(BaseModel):
    """Request model for posting or editing a reply."""

    body: str = Field(..., min_length=1, max_length=10000)


class ReplyResponse(BaseModel):
    """Response model for a reply."""

    id: str
    thread_id: str
    author_id: str
    body: str
    created_at: datetime
    updated_at: datetime
    author: AuthorResponse | None = None


class ThreadDetailResponse(BaseModel):
    """Response model for a thread with its replies."""

    thread: ThreadResponse
    replies: list[ReplyResponse]


def thread_to_response(
    thread: Any, author: Any = None, replies_count: int = 0
) -> ThreadResponse:
    """Convert a ForumThread model to ThreadResponse."""
    return ThreadResponse(
        id=thread.id,
        lesson_id=thread.lesson_id,
        author_id=thread.author_id,
        title=thread.title,
        body=thread.body,
        is_pinned=thread.is_pinned,
        is_locked=thread.is_locked,
        created_at=thread.created_at,
        updated_at=thread.updated_at,
        author=AuthorResponse.model_validate(author) if author is not None else None,
        replies_count=replies_count,
    )


def reply_to_response(reply: Any, author: Any = None) -> ReplyResponse:
    """Convert a ForumReply model to ReplyResponse."""
    return ReplyResponse(
        id=reply.id,
        thread_id=reply.thread_id,
        author_id=reply.author_id,
        body=reply.body,
        created_at=reply.created_at,
        updated_at=reply.updated_at,
        author=AuthorResponse.model_validate(author) if author is not None else None,
    )


# Chat models


class ChatSessionCreated(BaseModel):
    """Response with a freshly generated chat session ID."""

    session_id: str


class ChatMessageCreate(BaseModel):
    """Request model for sending a chat message."""

    message: str = Field(..., min_length=1, max_length=4000)
    user_name: str | None = Field(default=None, max_length=255)
    user_email: str | None = Field(default=None, max_length=255)


class ChatMessageResponse(BaseModel):
    """Response model for a chat message."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    message: str
    sender_type: str
    user_name: str | None
    created_at: datetime


class ChatSessionResponse(BaseModel):
    """Response model for a chat session summary."""

    model_config = ConfigDict(from_attributes=True)

    session_id: str
    message_count: int
    last_message_at: datetime
    user_name: str | None
    user_email: str | None


# Payment models


class PaymentRequest(BaseModel):
    """Request model for starting checkout."""

    course_id: str = Field(..., min_length=1)


class PaymentSessionResponse(BaseModel):
    """Response with the hosted checkout URL."""

    url: str


class PaymentVerification(BaseModel):
    """Response for a verified checkout session."""

    paid: bool
    course_id: str | None = None


# Site copy


class SiteCopyUpdate(BaseModel):
    """Request model for editing site copy."""

    values: dict[str, Any]


class StatsResponse(BaseModel):
    """Back-office dashboard counters."""

    courses: int
    registrations: dict[str, int]
    chat_sessions: int
