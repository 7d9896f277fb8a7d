"""Site Store - Persistent storage for the catalog, registrations, forum, chat and site copy."""

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
    SenderType,
    UserPurchase,
)
from tichnuta.site_store.store import SiteStore

__all__ = [
    "AllowedEmailNotFoundError",
    "ChatMessage",
    "ChatSessionSummary",
    "Course",
    "CourseAllowedEmail",
    "CourseExistsError",
    "CourseNotFoundError",
    "CoursePeriod",
    "CourseSchedule",
    "CourseVariant",
    "ForumReply",
    "ForumThread",
    "Lesson",
    "LessonNotFoundError",
    "LessonProgress",
    "PeriodNotFoundError",
    "Profile",
    "PurchaseNotFoundError",
    "PurchaseStatus",
    "Registration",
    "RegistrationNotFoundError",
    "RegistrationStatus",
    "ReplyNotFoundError",
    "ScheduleNotFoundError",
    "School",
    "SchoolNotFoundError",
    "SenderType",
    "SiteStore",
    "SiteStoreError",
    "ThreadNotFoundError",
    "UserPurchase",
    "VariantNotFoundError",
]
