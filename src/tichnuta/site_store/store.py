"""SiteStore - Main API for Site Store operations."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from tichnuta.site_store.database import Database
from tichnuta.site_store.exceptions import (
    AllowedEmailNotFoundError,
    CourseExistsError,
    CourseNotFoundError,
    LessonNotFoundError,
    PeriodNotFoundError,
    PurchaseNotFoundError,
    RegistrationNotFoundError,
    ReplyNotFoundError,
    ScheduleNotFoundError,
    SchoolNotFoundError,
    SiteStoreError,
    ThreadNotFoundError,
    VariantNotFoundError,
)
from tichnuta.site_store.models import (
    ChatMessage,
    ChatSessionSummary,
    Course,
    CourseAllowedEmail,
    CoursePeriod,
    CourseSchedule,
    CourseVariant,
    ForumReply,
    ForumThread,
    Lesson,
    LessonProgress,
    Profile,
    PurchaseStatus,
    Registration,
    RegistrationStatus,
    School,
    SiteContent,
    UserPurchase,
    utcnow,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

COURSE_FIELDS = frozenset(
    {
        "title",
        "subtitle",
        "description",
        "slug",
        "level",
        "duration",
        "group_size",
        "price_text",
        "price_number",
        "icon",
        "color",
        "features",
        "locations",
        "times",
        "active",
        "sort_order",
        "school_id",
    }
)
COURSE_NULLABLE = frozenset({"slug", "locations", "times", "school_id"})
LESSON_FIELDS = frozenset(
    {"title", "description", "video_url", "slides_url", "order_index", "is_preview"}
)
LESSON_NULLABLE = frozenset({"description", "video_url", "slides_url"})
SCHOOL_FIELDS = frozenset({"name", "description", "color", "icon", "active", "sort_order"})
SCHOOL_NULLABLE = frozenset({"description"})
VARIANT_FIELDS = frozenset(
    {
        "name",
        "gender",
        "location",
        "day_of_week",
        "start_time",
        "end_time",
        "min_grade",
        "max_grade",
        "learning_period",
        "is_active",
        "sort_order",
    }
)
VARIANT_NULLABLE = frozenset({"end_time", "min_grade", "max_grade", "learning_period"})


def _check_fields(
    changes: dict[str, Any], allowed: frozenset[str], nullable: frozenset[str]
) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    nulls = sorted(key for key, value in changes.items() if value is None and key not in nullable)
    if nulls:
        raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")


def _apply(
    obj: Any,
    changes: dict[str, Any],
    allowed: frozenset[str],
    nullable: frozenset[str] = frozenset(),
) -> None:
    _check_fields(changes, allowed, nullable)
    for key, value in changes.items():
        setattr(obj, key, value)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class SiteStore:
    """Main API for Site Store operations.

    Provides CRUD operations for the catalog (schools, courses, schedules,
    periods, variants, lessons), course access, lesson progress,
    registrations, the lesson forum, chat messages, purchases and editable
    site copy.
    """

    def __init__(self, db_path: str = "tichnuta.db") -> None:
        """Initialize Site Store with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self._db = Database(db_path)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- School Operations ---

    def create_school(self, name: str, **fields: Any) -> School:
        """Create a partner school."""
        _check_fields(fields, SCHOOL_FIELDS, SCHOOL_NULLABLE)
        with self._db.session() as session:
            school = School(name=name, **fields)
            session.add(school)
            session.flush()
            return school

    def get_school(self, school_id: str) -> School:
        """Get school by ID.

        Raises:
            SchoolNotFoundError: If school doesn't exist.
        """
        with self._db.session() as session:
            school = session.get(School, school_id)
            if school is None:
                raise SchoolNotFoundError(f"School with id '{school_id}' not found")
            return school

    def list_schools(self, active_only: bool = True) -> list[School]:
        """List schools by sort order, then name."""
        with self._db.session() as session:
            stmt = select(School).order_by(School.sort_order, School.name)
            if active_only:
                stmt = stmt.where(School.active.is_(True))
            return list(session.execute(stmt).scalars().all())

    def update_school(self, school_id: str, **changes: Any) -> School:
        """Update school fields. Only provided fields are updated.

        Raises:
            SchoolNotFoundError: If school doesn't exist.
        """
        with self._db.session() as session:
            school = session.get(School, school_id)
            if school is None:
                raise SchoolNotFoundError(f"School with id '{school_id}' not found")
            _apply(school, changes, SCHOOL_FIELDS, SCHOOL_NULLABLE)
            session.flush()
            return school

    def delete_school(self, school_id: str) -> None:
        """Delete a school. Its courses stay in the catalog without a school.

        Raises:
            SchoolNotFoundError: If school doesn't exist.
        """
        with self._db.session() as session:
            school = session.get(School, school_id)
            if school is None:
                raise SchoolNotFoundError(f"School with id '{school_id}' not found")
            session.delete(school)

    # --- Course Operations ---

    def create_course(self, title: str, **fields: Any) -> Course:
        """Create a new course.

        Args:
            title: Course title, shown in the catalog and stored on registrations.
            **fields: Any other column of ``Course``.

        Returns:
            Created Course with generated ID.

        Raises:
            CourseExistsError: If another course already uses the same slug.
            SchoolNotFoundError: If ``school_id`` names no school.
            ValueError: On unknown fields or a null non-nullable field.
        """
        _check_fields(fields, COURSE_FIELDS, COURSE_NULLABLE)
        try:
            with self._db.session() as session:
                self._check_school(session, fields.get("school_id"))
                course = Course(title=title, **fields)
                session.add(course)
                session.flush()
        except IntegrityError as e:
            if fields.get("slug"):
                raise CourseExistsError(
                    f"Course with slug '{fields['slug']}' already exists"
                ) from e
            raise SiteStoreError(f"Could not create course '{title}'") from e
        return course

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        with self._db.session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            return course

    def find_course(self, slug_or_id: str) -> Course:
        """Get course by slug, falling back to ID.

        Course pages are linked by slug, older links use the ID.

        Raises:
            CourseNotFoundError: If neither matches.
        """
        with self._db.session() as session:
            stmt = select(Course).where(Course.slug == slug_or_id)
            course = session.execute(stmt).scalar_one_or_none()
            if course is None:
                course = session.get(Course, slug_or_id)
            if course is None:
                raise CourseNotFoundError(f"Course '{slug_or_id}' not found")
            return course

    def list_courses(self, active_only: bool = True, school_id: str | None = None) -> list[Course]:
        """List courses ordered by sort order, then title.

        Args:
            active_only: Drop courses whose ``active`` flag is off.
            school_id: Only courses of this school.
        """
        with self._db.session() as session:
            stmt = select(Course).order_by(Course.sort_order, Course.title)
            if active_only:
                stmt = stmt.where(Course.active.is_(True))
            if school_id is not None:
                stmt = stmt.where(Course.school_id == school_id)
            return list(session.execute(stmt).scalars().all())

    def list_courses_by_ids(self, course_ids: Iterable[str]) -> list[Course]:
        """Get the active courses among ``course_ids``, in catalog order."""
        unique_ids = set(course_ids)
        if not unique_ids:
            return []
        with self._db.session() as session:
            stmt = (
                select(Course)
                .where(Course.id.in_(unique_ids), Course.active.is_(True))
                .order_by(Course.sort_order, Course.title)
            )
            return list(session.execute(stmt).scalars().all())

    def update_course(self, course_id: str, **changes: Any) -> Course:
        """Update course fields. Only provided fields are updated.

        Raises:
            CourseNotFoundError: If course doesn't exist.
            CourseExistsError: If the new slug is taken.
            SchoolNotFoundError: If ``school_id`` names no school.
            ValueError: On unknown fields or a null non-nullable field.
        """
        _check_fields(changes, COURSE_FIELDS, COURSE_NULLABLE)
        slug_changed = False
        try:
            with self._db.session() as session:
                course = session.get(Course, course_id)
                if course is None:
                    raise CourseNotFoundError(f"Course with id '{course_id}' not found")
                self._check_school(session, changes.get("school_id"))
                slug_changed = "slug" in changes and changes["slug"] != course.slug
                _apply(course, changes, COURSE_FIELDS, COURSE_NULLABLE)
                session.flush()
        except IntegrityError as e:
            if slug_changed:
                raise CourseExistsError(
                    f"Course with slug '{changes['slug']}' already exists"
                ) from e
            raise SiteStoreError(f"Could not update course '{course_id}'") from e
        return course

    @staticmethod
    def _check_school(session: Session, school_id: str | None) -> None:
        if school_id is not None and session.get(School, school_id) is None:
            raise SchoolNotFoundError(f"School with id '{school_id}' not found")

    def delete_course(self, course_id: str) -> None:
        """Delete a course together with its schedules, periods and lessons.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        with self._db.session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            session.delete(course)

    # --- Schedule Operations ---

    def add_schedule(
        self,
        course_id: str,
        location: str,
        day_of_week: str,
        start_time: str,
        end_time: str | None = None,
    ) -> CourseSchedule:
        """Add a schedule slot to a course.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            slot = CourseSchedule(
                course_id=course_id,
                location=location,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time or None,
            )
            session.add(slot)
            session.flush()
            return slot

    def list_schedules(self, course_id: str) -> list[CourseSchedule]:
        """List a course's schedule slots in the order they were added."""
        with self._db.session() as session:
            stmt = (
                select(CourseSchedule)
                .where(CourseSchedule.course_id == course_id)
                .order_by(CourseSchedule.created_at)
            )
            return list(session.execute(stmt).scalars().all())

    def update_schedule(
        self,
        schedule_id: str,
        location: str | None = None,
        day_of_week: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
    ) -> CourseSchedule:
        """Update a schedule slot. An empty ``end_time`` clears it.

        Raises:
            ScheduleNotFoundError: If slot doesn't exist.
        """
        with self._db.session() as session:
            slot = session.get(CourseSchedule, schedule_id)
            if slot is None:
                raise ScheduleNotFoundError(f"Schedule with id '{schedule_id}' not found")
            if location is not None:
                slot.location = location
            if day_of_week is not None:
                slot.day_of_week = day_of_week
            if start_time is not None:
                slot.start_time = start_time
            if end_time is not None:
                slot.end_time = end_time or None
            return slot

    def delete_schedule(self, schedule_id: str) -> None:
        """Delete a schedule slot.

        Raises:
            ScheduleNotFoundError: If slot doesn't exist.
        """
        with self._db.session() as session:
            slot = session.get(CourseSchedule, schedule_id)
            if slot is None:
                raise ScheduleNotFoundError(f"Schedule with id '{schedule_id}' not found")
            session.delete(slot)

    # --- Period Operations ---

    def add_period(
        self,
        course_id: str,
        name: str,
        start_date: date,
        end_date: date,
        is_active: bool = True,
    ) -> CoursePeriod:
        """Add a learning period to a course.

        Raises:
            CourseNotFoundError: If course doesn't exist.
            ValueError: If the period ends before it starts.
        """
        if end_date < start_date:
            raise ValueError("Period end date is before its start date")
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            period = CoursePeriod(
                course_id=course_id,
                name=name,
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
            )
            session.add(period)
            session.flush()
            return period

    def list_periods(self, course_id: str, active_only: bool = False) -> list[CoursePeriod]:
        """List a course's learning periods by start date ascending.

        Args:
            course_id: The course's unique ID.
            active_only: Drop periods whose ``is_active`` flag is off.
        """
        with self._db.session() as session:
            stmt = select(CoursePeriod).where(CoursePeriod.course_id == course_id)
            if active_only:
                stmt = stmt.where(CoursePeriod.is_active.is_(True))
            stmt = stmt.order_by(CoursePeriod.start_date, CoursePeriod.created_at)
            return list(session.execute(stmt).scalars().all())

    def update_period(
        self,
        period_id: str,
        name: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        is_active: bool | None = None,
    ) -> CoursePeriod:
        """Update a learning period.

        Raises:
            PeriodNotFoundError: If period doesn't exist.
            ValueError: If the resulting period ends before it starts.
        """
        with self._db.session() as session:
            period = session.get(CoursePeriod, period_id)
            if period is None:
                raise PeriodNotFoundError(f"Period with id '{period_id}' not found")
            if name is not None:
                period.name = name
            if start_date is not None:
                period.start_date = start_date
            if end_date is not None:
                period.end_date = end_date
            if is_active is not None:
                period.is_active = is_active
            if period.end_date < period.start_date:
                raise ValueError("Period end date is before its start date")
            return period

    def delete_period(self, period_id: str) -> None:
        """Delete a learning period.

        Raises:
            PeriodNotFoundError: If period doesn't exist.
        """
        with self._db.session() as session:
            period = session.get(CoursePeriod, period_id)
            if period is None:
                raise PeriodNotFoundError(f"Period with id '{period_id}' not found")
            session.delete(period)

    # --- Variant Operations ---

    def add_variant(
        self,
        course_id: str,
        name: str,
        gender: str,
        location: str,
        day_of_week: str,
        start_time: str,
        **fields: Any,
    ) -> CourseVariant:
        """Add a variant (audience, place and time) to a course.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        _check_fields(fields, VARIANT_FIELDS, VARIANT_NULLABLE)
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            variant = CourseVariant(
                course_id=course_id,
                name=name,
                gender=gender,
                location=location,
                day_of_week=day_of_week,
                start_time=start_time,
                **fields,
            )
            session.add(variant)
            session.flush()
            return variant

    def get_variant(self, variant_id: str) -> CourseVariant:
        """Get variant by ID.

        Raises:
            VariantNotFoundError: If variant doesn't exist.
        """
        with self._db.session() as session:
            variant = session.get(CourseVariant, variant_id)
            if variant is None:
                raise VariantNotFoundError(f"Variant with id '{variant_id}' not found")
            return variant

    def list_variants(self, course_id: str, active_only: bool = True) -> list[CourseVariant]:
        """List a course's variants by sort order, then gender and location."""
        with self._db.session() as session:
            stmt = (
                select(CourseVariant)
                .where(CourseVariant.course_id == course_id)
                .order_by(CourseVariant.sort_order, CourseVariant.gender, CourseVariant.location)
            )
            if active_only:
                stmt = stmt.where(CourseVariant.is_active.is_(True))
            return list(session.execute(stmt).scalars().all())

    def update_variant(self, variant_id: str, **changes: Any) -> CourseVariant:
        """Update variant fields. Only provided fields are updated.

        Raises:
            VariantNotFoundError: If variant doesn't exist.
        """
        with self._db.session() as session:
            variant = session.get(CourseVariant, variant_id)
            if variant is None:
                raise VariantNotFoundError(f"Variant with id '{variant_id}' not found")
            _apply(variant, changes, VARIANT_FIELDS, VARIANT_NULLABLE)
            session.flush()
            return variant

    def delete_variant(self, variant_id: str) -> None:
        """Delete a variant.

        Raises:
            VariantNotFoundError: If variant doesn't exist.
        """
        with self._db.session() as session:
            variant = session.get(CourseVariant, variant_id)
            if variant is None:
                raise VariantNotFoundError(f"Variant with id '{variant_id}' not found")
            session.delete(variant)

    # --- Lesson Operations ---

    def add_lesson(self, course_id: str, title: str, **fields: Any) -> Lesson:
        """Add a lesson to a course.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            lesson = Lesson(course_id=course_id, title=title)
            _apply(lesson, fields, LESSON_FIELDS, LESSON_NULLABLE)
            session.add(lesson)
            session.flush()
            return lesson

    def get_lesson(self, lesson_id: str) -> Lesson:
        """Get lesson by ID.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
        """
        with self._db.session() as session:
            lesson = session.get(Lesson, lesson_id)
            if lesson is None:
                raise LessonNotFoundError(f"Lesson with id '{lesson_id}' not found")
            return lesson

    def list_lessons(self, course_id: str) -> list[Lesson]:
        """List a course's lessons by their order index."""
        with self._db.session() as session:
            stmt = (
                select(Lesson)
                .where(Lesson.course_id == course_id)
                .order_by(Lesson.order_index, Lesson.created_at)
            )
            return list(session.execute(stmt).scalars().all())

    def update_lesson(self, lesson_id: str, **changes: Any) -> Lesson:
        """Update lesson fields. Only provided fields are updated.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
        """
        with self._db.session() as session:
            lesson = session.get(Lesson, lesson_id)
            if lesson is None:
                raise LessonNotFoundError(f"Lesson with id '{lesson_id}' not found")
            _apply(lesson, changes, LESSON_FIELDS, LESSON_NULLABLE)
            session.flush()
            return lesson

    def delete_lesson(self, lesson_id: str) -> None:
        """Delete a lesson and its forum threads.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
        """
        with self._db.session() as session:
            lesson = session.get(Lesson, lesson_id)
            if lesson is None:
                raise LessonNotFoundError(f"Lesson with id '{lesson_id}' not found")
            session.delete(lesson)

    # --- Course Access Operations ---

    def add_allowed_emails(
        self, course_id: str, emails: Iterable[str]
    ) -> tuple[list[CourseAllowedEmail], list[str]]:
        """Grant course access to e-mail addresses.

        Addresses are stored lower-cased. Addresses that already have access
        are skipped.

        Returns:
            The new entries and the skipped addresses.

        Raises:
            CourseNotFoundError: If course doesn't exist.
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            stmt = select(CourseAllowedEmail.email).where(
                CourseAllowedEmail.course_id == course_id
            )
            existing = set(session.execute(stmt).scalars().all())
            added: list[CourseAllowedEmail] = []
            skipped: list[str] = []
            for email in dict.fromkeys(_normalize_email(e) for e in emails):
                if email in existing:
                    skipped.append(email)
                    continue
                entry = CourseAllowedEmail(course_id=course_id, email=email)
                session.add(entry)
                added.append(entry)
            session.flush()
            return added, skipped

    def list_allowed_emails(self, course_id: str) -> list[CourseAllowedEmail]:
        """List the addresses with access to a course, newest first."""
        with self._db.session() as session:
            stmt = (
                select(CourseAllowedEmail)
                .where(CourseAllowedEmail.course_id == course_id)
                .order_by(CourseAllowedEmail.created_at.desc(), CourseAllowedEmail.email)
            )
            return list(session.execute(stmt).scalars().all())

    def delete_allowed_email(self, entry_id: str) -> None:
        """Revoke one address's access.

        Raises:
            AllowedEmailNotFoundError: If the entry doesn't exist.
        """
        with self._db.session() as session:
            entry = session.get(CourseAllowedEmail, entry_id)
            if entry is None:
                raise AllowedEmailNotFoundError(f"Access entry with id '{entry_id}' not found")
            session.delete(entry)

    def is_email_allowed(self, course_id: str, email: str) -> bool:
        """Whether ``email`` was granted access to the course."""
        with self._db.session() as session:
            stmt = select(CourseAllowedEmail.id).where(
                CourseAllowedEmail.course_id == course_id,
                CourseAllowedEmail.email == _normalize_email(email),
            )
            return session.execute(stmt).first() is not None

    def list_allowed_course_ids(self, email: str) -> list[str]:
        """IDs of the courses ``email`` was granted access to."""
        with self._db.session() as session:
            stmt = select(CourseAllowedEmail.course_id).where(
                CourseAllowedEmail.email == _normalize_email(email)
            )
            return list(session.execute(stmt).scalars().all())

    # --- Lesson Progress Operations ---

    def save_lesson_progress(
        self,
        user_id: str,
        lesson_id: str,
        completed: bool,
        watch_time_seconds: int | None = None,
    ) -> LessonProgress:
        """Create or update a user's progress on a lesson.

        ``completed_at`` is set when the lesson becomes completed and cleared
        when it is marked incomplete again.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
        """
        with self._db.session() as session:
            if session.get(Lesson, lesson_id) is None:
                raise LessonNotFoundError(f"Lesson with id '{lesson_id}' not found")
            stmt = select(LessonProgress).where(
                LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id
            )
            progress = session.execute(stmt).scalar_one_or_none()
            if progress is None:
                progress = LessonProgress(user_id=user_id, lesson_id=lesson_id, completed=False)
                session.add(progress)
            if completed and not progress.completed:
                progress.completed_at = utcnow()
            elif not completed:
                progress.completed_at = None
            progress.completed = completed
            if watch_time_seconds is not None:
                progress.watch_time_seconds = watch_time_seconds
            session.flush()
            return progress

    def get_lesson_progress(
        self, user_id: str, lesson_ids: Iterable[str]
    ) -> dict[str, LessonProgress]:
        """Get a user's progress on the given lessons, keyed by lesson ID."""
        unique_ids = set(lesson_ids)
        if not unique_ids:
            return {}
        with self._db.session() as session:
            stmt = select(LessonProgress).where(
                LessonProgress.user_id == user_id, LessonProgress.lesson_id.in_(unique_ids)
            )
            return {p.lesson_id: p for p in session.execute(stmt).scalars().all()}

    # --- Registration Operations ---

    def create_registration(
        self,
        name: str,
        phone: str,
        email: str,
        course: str,
        location: str | None = None,
        grade: str | None = None,
        time: str | None = None,
        gender: str | None = None,
        learning_period: str | None = None,
        message: str | None = None,
        school_name: str | None = None,
    ) -> Registration:
        """Insert a registration with status ``new``."""
        with self._db.session() as session:
            registration = Registration(
                name=name,
                phone=phone,
                email=email,
                course=course,
                location=location,
                grade=grade,
                time=time,
                gender=gender,
                learning_period=learning_period,
                message=message,
                school_name=school_name,
            )
            session.add(registration)
            session.flush()
            return registration

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist.
        """
        with self._db.session() as session:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return registration

    def list_registrations(
        self,
        status: RegistrationStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Registration]:
        """List registrations, newest first.

        Args:
            status: Filter by handling status (optional).
            limit: Max results to return.
            offset: Pagination offset.
        """
        with self._db.session() as session:
            stmt = select(Registration)
            if status is not None:
                stmt = stmt.where(Registration.status == status.value)
            stmt = stmt.order_by(Registration.created_at.desc()).limit(limit).offset(offset)
            return list(session.execute(stmt).scalars().all())

    def count_registrations_by_status(self) -> dict[str, int]:
        """Count registrations per status. Statuses with none are reported as 0."""
        counts = {s.value: 0 for s in RegistrationStatus}
        with self._db.session() as session:
            stmt = select(Registration.status, func.count()).group_by(Registration.status)
            for status, count in session.execute(stmt):
                counts[status] = count
        return counts

    def update_registration_status(
        self, registration_id: str, status: RegistrationStatus
    ) -> Registration:
        """Set a registration's handling status.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist.
        """
        with self._db.session() as session:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            registration.status = status.value
            session.flush()
            return registration

    def delete_registration(self, registration_id: str) -> None:
        """Delete a registration.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist.
        """
        with self._db.session() as session:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            session.delete(registration)

    # --- Profile Operations ---

    def upsert_profile(
        self, user_id: str, display_name: str | None = None, avatar_url: str | None = None
    ) -> Profile:
        """Create or update a user's public profile."""
        with self._db.session() as session:
            profile = session.get(Profile, user_id)
            if profile is None:
                profile = Profile(id=user_id)
                session.add(profile)
            profile.display_name = display_name
            profile.avatar_url = avatar_url
            session.flush()
            return profile

    def get_profiles(self, user_ids: Iterable[str]) -> dict[str, Profile]:
        """Get profiles for the given users, keyed by user ID. Unknown IDs are skipped."""
        unique_ids = set(user_ids)
        if not unique_ids:
            return {}
        with self._db.session() as session:
            stmt = select(Profile).where(Profile.id.in_(unique_ids))
            return {p.id: p for p in session.execute(stmt).scalars().all()}

    # --- Forum Operations ---

    def create_thread(self, lesson_id: str, author_id: str, title: str, body: str) -> ForumThread:
        """Open a new thread on a lesson.

        Raises:
            LessonNotFoundError: If lesson doesn't exist.
        """
        with self._db.session() as session:
            if session.get(Lesson, lesson_id) is None:
                raise LessonNotFoundError(f"Lesson with id '{lesson_id}' not found")
            thread = ForumThread(lesson_id=lesson_id, author_id=author_id, title=title, body=body)
            session.add(thread)
            session.flush()
            return thread

    def get_thread(self, thread_id: str) -> ForumThread:
        """Get thread by ID.

        Raises:
            ThreadNotFoundError: If thread doesn't exist.
        """
        with self._db.session() as session:
            thread = session.get(ForumThread, thread_id)
            if thread is None:
                raise ThreadNotFoundError(f"Thread with id '{thread_id}' not found")
            return thread

    def list_threads(self, lesson_id: str) -> list[ForumThread]:
        """List a lesson's threads, pinned first, then newest first."""
        with self._db.session() as session:
            stmt = (
                select(ForumThread)
                .where(ForumThread.lesson_id == lesson_id)
                .order_by(ForumThread.is_pinned.desc(), ForumThread.created_at.desc())
            )
            return list(session.execute(stmt).scalars().all())

    def count_replies(self, thread_ids: Iterable[str]) -> dict[str, int]:
        """Count replies per thread. Threads without replies are omitted."""
        ids = list(thread_ids)
        if not ids:
            return {}
        with self._db.session() as session:
            stmt = (
                select(ForumReply.thread_id, func.count())
                .where(ForumReply.thread_id.in_(ids))
                .group_by(ForumReply.thread_id)
            )
            return {thread_id: count for thread_id, count in session.execute(stmt)}

    def update_thread(
        self,
        thread_id: str,
        title: str | None = None,
        body: str | None = None,
        is_pinned: bool | None = None,
        is_locked: bool | None = None,
    ) -> ForumThread:
        """Update a thread. Only provided fields are updated.

        Raises:
            ThreadNotFoundError: If thread doesn't exist.
        """
        with self._db.session() as session:
            thread = session.get(ForumThread, thread_id)
            if thread is None:
                raise ThreadNotFoundError(f"Thread with id '{thread_id}' not found")
            if title is not None:
                thread.title = title
            if body is not None:
                thread.body = body
            if is_pinned is not None:
                thread.is_pinned = is_pinned
            if is_locked is not None:
                thread.is_locked = is_locked
            session.flush()
            return thread

    def delete_thread(self, thread_id: str) -> None:
        """Delete a thread and its replies.

        Raises:
            ThreadNotFoundError: If thread doesn't exist.
        """
        with self._db.session() as session:
            thread = session.get(ForumThread, thread_id)
            if thread is None:
                raise ThreadNotFoundError(f"Thread with id '{thread_id}' not found")
            session.delete(thread)

    def create_reply(self, thread_id: str, author_id: str, body: str) -> ForumReply:
        """Add a reply to a thread.

        Raises:
            ThreadNotFoundError: If thread doesn't exist.
        """
        with self._db.session() as session:
            if session.get(ForumThread, thread_id) is None:
                raise ThreadNotFoundError(f"Thread with id '{thread_id}' not found")
            reply = ForumReply(thread_id=thread_id, author_id=author_id, body=body)
            session.add(reply)
            session.flush()
            return reply

    def get_reply(self, reply_id: str) -> ForumReply:
        """Get reply by ID.

        Raises:
            ReplyNotFoundError: If reply doesn't exist.
        """
        with self._db.session() as session:
            reply = session.get(ForumReply, reply_id)
            if reply is None:
                raise ReplyNotFoundError(f"Reply with id '{reply_id}' not found")
            return reply

    def list_replies(self, thread_id: str) -> list[ForumReply]:
        """List a thread's replies, oldest first."""
        with self._db.session() as session:
            stmt = (
                select(ForumReply)
                .where(ForumReply.thread_id == thread_id)
                .order_by(ForumReply.created_at)
            )
            return list(session.execute(stmt).scalars().all())

    def update_reply(self, reply_id: str, body: str) -> ForumReply:
        """Replace a reply's body.

        Raises:
            ReplyNotFoundError: If reply doesn't exist.
        """
        with self._db.session() as session:
            reply = session.get(ForumReply, reply_id)
            if reply is None:
                raise ReplyNotFoundError(f"Reply with id '{reply_id}' not found")
            reply.body = body
            session.flush()
            return reply

    def delete_reply(self, reply_id: str) -> None:
        """Delete a reply.

        Raises:
            ReplyNotFoundError: If reply doesn't exist.
        """
        with self._db.session() as session:
            reply = session.get(ForumReply, reply_id)
            if reply is None:
                raise ReplyNotFoundError(f"Reply with id '{reply_id}' not found")
            session.delete(reply)

    # --- Chat Operations ---

    def add_chat_message(
        self,
        session_id: str,
        message: str,
        sender_type: str,
        user_name: str | None = None,
        user_email: str | None = None,
    ) -> ChatMessage:
        """Append a message to a chat session."""
        with self._db.session() as session:
            chat_message = ChatMessage(
                session_id=session_id,
                message=message,
                sender_type=sender_type,
                user_name=user_name,
                user_email=user_email,
                created_at=utcnow(),
            )
            session.add(chat_message)
            session.flush()
            return chat_message

    def list_chat_messages(self, session_id: str) -> list[ChatMessage]:
        """List a chat session's messages, oldest first."""
        with self._db.session() as session:
            stmt = (
                select(ChatMessage)
                .where(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at)
            )
            return list(session.execute(stmt).scalars().all())

    def list_chat_sessions(self) -> list[ChatSessionSummary]:
        """Summarize all chat sessions, most recently active first."""
        with self._db.session() as session:
            stmt = (
                select(
                    ChatMessage.session_id,
                    func.count(),
                    func.max(ChatMessage.created_at),
                    func.max(ChatMessage.user_name),
                    func.max(ChatMessage.user_email),
                )
                .group_by(ChatMessage.session_id)
                .order_by(func.max(ChatMessage.created_at).desc())
            )
            return [
                ChatSessionSummary(
                    session_id=session_id,
                    message_count=count,
                    last_message_at=last_at,
                    user_name=user_name,
                    user_email=user_email,
                )
                for session_id, count, last_at, user_name, user_email in session.execute(stmt)
            ]

    # --- Purchase Operations ---

    def create_purchase(
        self,
        user_id: str,
        course_id: str,
        stripe_session_id: str,
        amount_paid: int,
        currency: str,
    ) -> UserPurchase:
        """Record a pending purchase for a checkout session."""
        with self._db.session() as session:
            purchase = UserPurchase(
                user_id=user_id,
                course_id=course_id,
                stripe_session_id=stripe_session_id,
                amount_paid=amount_paid,
                currency=currency,
                status=PurchaseStatus.PENDING.value,
                purchased_at=utcnow(),
            )
            session.add(purchase)
            session.flush()
            return purchase

    def get_completed_purchase(self, user_id: str, course_id: str) -> UserPurchase | None:
        """Get the user's completed purchase of a course, if any."""
        with self._db.session() as session:
            stmt = select(UserPurchase).where(
                UserPurchase.user_id == user_id,
                UserPurchase.course_id == course_id,
                UserPurchase.status == PurchaseStatus.COMPLETED.value,
            )
            return session.execute(stmt).scalars().first()

    def list_purchased_course_ids(self, user_id: str) -> list[str]:
        """IDs of the courses the user completed a purchase of."""
        with self._db.session() as session:
            stmt = select(UserPurchase.course_id).where(
                UserPurchase.user_id == user_id,
                UserPurchase.status == PurchaseStatus.COMPLETED.value,
            )
            return list(session.execute(stmt).scalars().all())

    def complete_purchase(self, stripe_session_id: str) -> UserPurchase:
        """Mark the purchase for a checkout session as completed.

        Raises:
            PurchaseNotFoundError: If no purchase was recorded for the session.
        """
        with self._db.session() as session:
            stmt = select(UserPurchase).where(UserPurchase.stripe_session_id == stripe_session_id)
            purchase = session.execute(stmt).scalar_one_or_none()
            if purchase is None:
                raise PurchaseNotFoundError(
                    f"Purchase for session '{stripe_session_id}' not found"
                )
            purchase.status = PurchaseStatus.COMPLETED.value
            session.flush()
            return purchase

    # --- Site Content Operations ---

    def get_site_content(self) -> dict[str, Any]:
        """Get all stored site copy overrides, keyed by name."""
        with self._db.session() as session:
            rows = session.execute(select(SiteContent)).scalars().all()
            return {row.key: row.value for row in rows}

    def set_site_content(self, values: dict[str, Any]) -> dict[str, Any]:
        """Store site copy overrides. Keys not mentioned are left as they are.

        Returns:
            All stored overrides after the update.
        """
        with self._db.session() as session:
            for key, value in values.items():
                row = session.get(SiteContent, key)
                if row is None:
                    session.add(SiteContent(key=key, value=value))
                else:
                    row.value = value
        return self.get_site_content()

    def reset_site_content(self) -> None:
        """Remove all site copy overrides."""
        with self._db.session() as session:
            for row in session.execute(select(SiteContent)).scalars().all():
                session.delete(row)
