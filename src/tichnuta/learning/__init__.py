"""Learning - access to course lessons and lesson progress."""

from tichnuta.learning.exceptions import CourseAccessDeniedError, LearningError
from tichnuta.learning.models import LessonView, Viewer
from tichnuta.learning.service import LearningService

__all__ = [
    "CourseAccessDeniedError",
    "LearningError",
    "LearningService",
    "LessonView",
    "Viewer",
]
