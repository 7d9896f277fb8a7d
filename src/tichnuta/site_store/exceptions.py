"""Custom exceptions for the Site Store."""


class SiteStoreError(Exception):
    """Base exception for Site Store errors."""


class CourseNotFoundError(SiteStoreError):
    """Course with given ID or slug does not exist."""


class CourseExistsError(SiteStoreError):
    """Course with given slug already exists."""


class ScheduleNotFoundError(SiteStoreError):
    """Schedule slot with given ID does not exist."""


class PeriodNotFoundError(SiteStoreError):
    """Learning period with given ID does not exist."""


class LessonNotFoundError(SiteStoreError):
    """Lesson with given ID does not exist."""


class RegistrationNotFoundError(SiteStoreError):
    """Registration with given ID does not exist."""


class ThreadNotFoundError(SiteStoreError):
    """Forum thread with given ID does not exist."""


class ReplyNotFoundError(SiteStoreError):
    """Forum reply with given ID does not exist."""


class PurchaseNotFoundError(SiteStoreError):
    """Purchase with given checkout session does not exist."""


class SchoolNotFoundError(SiteStoreError):
    """School with given ID does not exist."""


class VariantNotFoundError(SiteStoreError):
    """Course variant with given ID does not exist."""


class AllowedEmailNotFoundError(SiteStoreError):
    """Course access entry with given ID does not exist."""
