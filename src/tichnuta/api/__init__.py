"""REST API for Tichnuta."""

from tichnuta.api.app import app, create_app
from tichnuta.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    RegistrationRequest,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseUpdate",
    "RegistrationRequest",
    "app",
    "create_app",
]
