"""SQLAlchemy models for the Site Store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class RegistrationStatus(StrEnum):
    """Back-office handling status of a registration."""

    NEW = "new"
    CONTACTED = "contacted"
    CLOSED = "closed"


class PurchaseStatus(StrEnum):
    """Status of a course purchase."""

    PENDING = "pending"
    COMPLETED = "completed"


class SenderType(StrEnum):
    """Who wrote a chat message."""

    USER = "user"
    ADMIN = "admin"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )


class School(TimestampMixin, Base):
    """A partner school with its own course page."""

    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(50), nullable=False, default="bg-primary")
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="GraduationCap")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<School(id={self.id!r}, name={self.name!r})>"


class Course(TimestampMixin, Base):
    """Course model - a registerable course offering.

    ``locations`` and ``times`` are the coarse fallback lists used by the
    registration form when the course has no schedule slots.
    """

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    subtitle: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str | None] = mapped_column(String(200), nullable=True, unique=True)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    duration: Mapped[str] = mapped_column(String(100), nullable=False)
    group_size: Mapped[str] = mapped_column(String(100), nullable=False)
    price_text: Mapped[str] = mapped_column(String(100), nullable=False)
    price_number: Mapped[int] = mapped_column(Integer, nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    locations: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    times: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)
    school_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("schools.id", ondelete="SET NULL"), nullable=True, index=True
    )

    schedules: Mapped[list[CourseSchedule]] = relationship(
        "CourseSchedule", back_populates="course", cascade="all, delete-orphan"
    )
    periods: Mapped[list[CoursePeriod]] = relationship(
        "CoursePeriod", back_populates="course", cascade="all, delete-orphan"
    )
    lessons: Mapped[list[Lesson]] = relationship(
        "Lesson", back_populates="course", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        title: str,
        id: str | None = None,
        subtitle: str = "",
        description: str = "",
        slug: str | None = None,
        level: str = "",
        duration: str = "",
        group_size: str = "",
        price_text: str = "",
        price_number: int = 0,
        icon: str = "Code2",
        color: str = "primary",
        features: list[str] | None = None,
        locations: list[str] | None = None,
        times: list[str] | None = None,
        active: bool = True,
        sort_order: int = 0,
        school_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.subtitle = subtitle
        self.description = description
        self.slug = slug
        self.level = level
        self.duration = duration
        self.group_size = group_size
        self.price_text = price_text
        self.price_number = price_number
        self.icon = icon
        self.color = color
        self.features = list(features) if features else []
        self.locations = list(locations) if locations is not None else None
        self.times = list(times) if times is not None else None
        self.active = active
        self.sort_order = sort_order
        self.school_id = school_id

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, title={self.title!r})>"


class CourseSchedule(TimestampMixin, Base):
    """A concrete (location, day, time) offering of a course."""

    __tablename__ = "course_schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(50), nullable=False)
    start_time: Mapped[str] = mapped_column(String(20), nullable=False)
    end_time: Mapped[str | None] = mapped_column(String(20), nullable=True)

    course: Mapped[Course] = relationship("Course", back_populates="schedules")

    def __repr__(self) -> str:
        return (
            f"<CourseSchedule(id={self.id!r}, location={self.location!r}, "
            f"day_of_week={self.day_of_week!r})>"
        )


class CoursePeriod(TimestampMixin, Base):
    """A named enrollment window (e.g. a semester) of a course."""

    __tablename__ = "course_periods"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    course: Mapped[Course] = relationship("Course", back_populates="periods")

    def __repr__(self) -> str:
        return f"<CoursePeriod(id={self.id!r}, name={self.name!r}, is_active={self.is_active!r})>"


class Lesson(TimestampMixin, Base):
    """A lesson within a course."""

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    slides_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_preview: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    course: Mapped[Course] = relationship("Course", back_populates="lessons")


class CourseVariant(TimestampMixin, Base):
    """A concrete group of a course: audience, place and time.

    Course pages list the active variants; choosing one opens the
    registration dialog with its selections prefilled.
    """

    __tablename__ = "course_variants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(50), nullable=False)
    start_time: Mapped[str] = mapped_column(String(20), nullable=False)
    end_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    min_grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    max_grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    learning_period: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<CourseVariant(id={self.id!r}, name={self.name!r})>"


class CourseAllowedEmail(Base):
    """An e-mail address granted access to a course's lessons."""

    __tablename__ = "course_allowed_emails"
    __table_args__ = (UniqueConstraint("course_id", "email"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class LessonProgress(TimestampMixin, Base):
    """How far a user got with a lesson."""

    __tablename__ = "lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    lesson_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    watch_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Registration(TimestampMixin, Base):
    """Registration model - a submitted registration/contact form."""

    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    course: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    time: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    learning_period: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    school_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    def __init__(
        self,
        name: str,
        phone: str,
        email: str,
        course: str,
        id: str | None = None,
        location: str | None = None,
        grade: str | None = None,
        time: str | None = None,
        gender: str | None = None,
        learning_period: str | None = None,
        message: str | None = None,
        school_name: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.phone = phone
        self.email = email
        self.course = course
        self.location = location
        self.grade = grade
        self.time = time
        self.gender = gender
        self.learning_period = learning_period
        self.message = message
        self.school_name = school_name
        self.status = status if status is not None else RegistrationStatus.NEW.value

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    def __repr__(self) -> str:
        return f"<Registration(id={self.id!r}, course={self.course!r}, status={self.status!r})>"


class Profile(TimestampMixin, Base):
    """Public profile of a site user (forum author)."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)


class ForumThread(TimestampMixin, Base):
    """A discussion thread attached to a lesson."""

    __tablename__ = "lesson_forum_threads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    lesson_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    replies: Mapped[list[ForumReply]] = relationship(
        "ForumReply", back_populates="thread", cascade="all, delete-orphan"
    )


class ForumReply(TimestampMixin, Base):
    """A reply in a forum thread."""

    __tablename__ = "lesson_forum_replies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    thread_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("lesson_forum_threads.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    thread: Mapped[ForumThread] = relationship("ForumThread", back_populates="replies")


class ChatMessage(Base):
    """A message in a chat-widget session."""

    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    session_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sender_type: Mapped[str] = mapped_column(String(10), nullable=False)
    user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Python-side default keeps microseconds so same-second messages stay ordered
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class UserPurchase(Base):
    """A course purchase made through hosted checkout."""

    __tablename__ = "user_purchases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    stripe_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    amount_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    purchased_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )


class SiteContent(Base):
    """A single editable piece of site copy, keyed by name."""

    __tablename__ = "site_content"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


@dataclass
class ChatSessionSummary:
    """Aggregated view of one chat session for the back office."""

    session_id: str
    message_count: int
    last_message_at: datetime
    user_name: str | None = None
    user_email: str | None = None
