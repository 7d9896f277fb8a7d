"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tichnuta.api.dependencies import (
    AdminRequiredError,
    AuthenticationError,
    close_checkout_client,
    close_site_store,
    init_chat_events,
    init_checkout_client,
    init_settings,
    init_site_store,
)
from tichnuta.api.models import APIResponse
from tichnuta.api.routes import (
    access,
    chat,
    content,
    courses,
    forum,
    lessons,
    payments,
    registrations,
    schedules,
    schools,
    variants,
)
from tichnuta.chat import EmptyMessageError, InvalidSessionError
from tichnuta.config import Settings
from tichnuta.forum import EmptyPostError, NotAuthorError, ThreadLockedError
from tichnuta.learning import CourseAccessDeniedError
from tichnuta.payments import (
    AlreadyPurchasedError,
    CheckoutError,
    PaymentNotConfiguredError,
    StripeCheckoutClient,
)
from tichnuta.site_copy import UnknownCopyKeyError
from tichnuta.site_store import (
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

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

# Exception -> (status code, error message). A None message means str(exc).
ERROR_RESPONSES: dict[type[Exception], tuple[int, str | None]] = {
    CourseNotFoundError: (status.HTTP_404_NOT_FOUND, "Course not found"),
    ScheduleNotFoundError: (status.HTTP_404_NOT_FOUND, "Schedule not found"),
    PeriodNotFoundError: (status.HTTP_404_NOT_FOUND, "Period not found"),
    LessonNotFoundError: (status.HTTP_404_NOT_FOUND, "Lesson not found"),
    RegistrationNotFoundError: (status.HTTP_404_NOT_FOUND, "Registration not found"),
    ThreadNotFoundError: (status.HTTP_404_NOT_FOUND, "Thread not found"),
    ReplyNotFoundError: (status.HTTP_404_NOT_FOUND, "Reply not found"),
    PurchaseNotFoundError: (status.HTTP_404_NOT_FOUND, "Purchase not found"),
    SchoolNotFoundError: (status.HTTP_404_NOT_FOUND, "School not found"),
    VariantNotFoundError: (status.HTTP_404_NOT_FOUND, "Variant not found"),
    AllowedEmailNotFoundError: (status.HTTP_404_NOT_FOUND, "Access entry not found"),
    CourseExistsError: (status.HTTP_409_CONFLICT, "Course with this slug already exists"),
    SiteStoreError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    AuthenticationError: (status.HTTP_401_UNAUTHORIZED, "Sign-in required"),
    AdminRequiredError: (status.HTTP_403_FORBIDDEN, "Admin access required"),
    CourseAccessDeniedError: (status.HTTP_403_FORBIDDEN, "No access to this course"),
    NotAuthorError: (status.HTTP_403_FORBIDDEN, "Only the author or an admin may do this"),
    ThreadLockedError: (status.HTTP_409_CONFLICT, "Thread is locked"),
    EmptyPostError: (status.HTTP_400_BAD_REQUEST, None),
    EmptyMessageError: (status.HTTP_400_BAD_REQUEST, "Message must not be empty"),
    InvalidSessionError: (status.HTTP_400_BAD_REQUEST, "Invalid chat session"),
    AlreadyPurchasedError: (status.HTTP_409_CONFLICT, "Course already purchased"),
    CheckoutError: (status.HTTP_502_BAD_GATEWAY, "Payment provider error"),
    PaymentNotConfiguredError: (status.HTTP_503_SERVICE_UNAVAILABLE, "Payments are not configured"),
    UnknownCopyKeyError: (status.HTTP_400_BAD_REQUEST, None),
    ValueError: (status.HTTP_400_BAD_REQUEST, None),
}


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to enveloped JSON errors."""

    async def handle(_request: Request, exc: Exception) -> JSONResponse:
        for exc_type in type(exc).__mro__:
            if exc_type in ERROR_RESPONSES:
                status_code, message = ERROR_RESPONSES[exc_type]
                break
        else:
            status_code, message = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"

        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed with %s: %s", type(exc).__name__, exc)
        if message is None:
            message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
        return JSONResponse(
            status_code=status_code,
            content=APIResponse[None](data=None, error=message).model_dump(),
        )

    for exc_type in ERROR_RESPONSES:
        app.add_exception_handler(exc_type, handle)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    init_settings(settings)
    init_site_store(settings.db_path)
    init_chat_events()
    init_checkout_client(
        StripeCheckoutClient(settings.stripe_secret_key, base_url=settings.stripe_api_base)
    )
    if not settings.admin_token:
        logger.warning("TICHNUTA_ADMIN_TOKEN is not set; the back office is disabled")
    if not settings.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY is not set; checkout is disabled")
    logger.info("Tichnuta API started with database %s", settings.db_path)

    yield
    # Shutdown
    close_checkout_client()
    close_site_store()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Tichnuta API",
        description="REST API for Tichnuta - coding classes for kids",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings if settings is not None else Settings.from_env()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(schedules.router, prefix="/api/v1")
    app.include_router(lessons.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(forum.router, prefix="/api/v1")
    app.include_router(chat.router, prefix="/api/v1")
    app.include_router(payments.router, prefix="/api/v1")
    app.include_router(variants.router, prefix="/api/v1")
    app.include_router(schools.router, prefix="/api/v1")
    app.include_router(access.router, prefix="/api/v1")
    app.include_router(content.router, prefix="/api/v1")

    return app


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from tichnuta.logging import setup_logging  # noqa: PLC0415

    setup_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)  # noqa: S104


# Default app instance
app = create_app()
