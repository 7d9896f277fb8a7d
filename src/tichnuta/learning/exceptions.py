"""Custom exceptions for course content access."""


class LearningError(Exception):
    """Base exception for lesson access errors."""


class CourseAccessDeniedError(LearningError):
    """Viewer may not see the course's non-preview lessons."""
