"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

import secrets
from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, Header, Query

from tichnuta.chat import ChatEventManager, ChatService
from tichnuta.config import Settings
from tichnuta.forum import ForumService
from tichnuta.learning import LearningService, Viewer
from tichnuta.payments import PaymentService, StripeCheckoutClient
from tichnuta.registration import ScheduleLoader, SubmissionHandler
from tichnuta.site_store import SiteStore


class AuthenticationError(Exception):
    """No user identity on the request."""


class AdminRequiredError(Exception):
    """Request needs the admin token."""


# Global settings (initialized on app startup)
_settings: Settings = Settings()


def init_settings(settings: Settings) -> Settings:
    """Initialize the global Settings instance."""
    global _settings  # noqa: PLW0603
    _settings = settings
    return _settings


def get_settings() -> Settings:
    """Dependency that provides the Settings instance."""
    return _settings


SettingsDep = Annotated[Settings, Depends(get_settings)]

# Global SiteStore instance (initialized on app startup)
_site_store: SiteStore | None = None


def init_site_store(db_path: str = "tichnuta.db") -> SiteStore:
    """Initialize the global SiteStore instance."""
    global _site_store  # noqa: PLW0603
    _site_store = SiteStore(db_path)
    return _site_store


def close_site_store() -> None:
    """Close the global SiteStore instance."""
    global _site_store  # noqa: PLW0603
    if _site_store is not None:
        _site_store.close()
        _site_store = None


def get_site_store() -> Generator[SiteStore, None, None]:
    """Dependency that provides the SiteStore instance."""
    if _site_store is None:
        raise RuntimeError("SiteStore not initialized. Call init_site_store() first.")
    yield _site_store


SiteStoreDep = Annotated[SiteStore, Depends(get_site_store)]

# Global ChatEventManager instance
_chat_events: ChatEventManager | None = None


def init_chat_events() -> ChatEventManager:
    """Initialize the global ChatEventManager instance."""
    global _chat_events  # noqa: PLW0603
    _chat_events = ChatEventManager()
    return _chat_events


def get_chat_events() -> Generator[ChatEventManager, None, None]:
    """Dependency that provides the ChatEventManager instance."""
    if _chat_events is None:
        raise RuntimeError("ChatEventManager not initialized. Call init_chat_events() first.")
    yield _chat_events


ChatEventsDep = Annotated[ChatEventManager, Depends(get_chat_events)]

# Global Stripe client (initialized on app startup)
_checkout_client: StripeCheckoutClient | None = None


def init_checkout_client(client: StripeCheckoutClient) -> None:
    """Initialize the global StripeCheckoutClient instance."""
    global _checkout_client  # noqa: PLW0603
    _checkout_client = client


def close_checkout_client() -> None:
    """Close the global StripeCheckoutClient instance."""
    global _checkout_client  # noqa: PLW0603
    if _checkout_client is not None:
        _checkout_client.close()
        _checkout_client = None


def get_checkout_client() -> Generator[StripeCheckoutClient, None, None]:
    """Dependency that provides the StripeCheckoutClient instance."""
    if _checkout_client is None:
        raise RuntimeError("Checkout client not initialized. Call init_checkout_client() first.")
    yield _checkout_client


CheckoutClientDep = Annotated[StripeCheckoutClient, Depends(get_checkout_client)]


# Services built per request on top of the globals


def get_schedule_loader(store: SiteStoreDep) -> ScheduleLoader:
    return ScheduleLoader(store)


def get_submission_handler(
    store: SiteStoreDep,
    school_id: str | None = Query(default=None, description="Partner school of the form"),
) -> SubmissionHandler:
    school_name = store.get_school(school_id).name if school_id else None
    return SubmissionHandler(store, school_name=school_name)


def get_forum_service(store: SiteStoreDep) -> ForumService:
    return ForumService(store)


def get_chat_service(store: SiteStoreDep, events: ChatEventsDep) -> ChatService:
    return ChatService(store, events)


def get_learning_service(store: SiteStoreDep) -> LearningService:
    return LearningService(store)


def get_payment_service(
    store: SiteStoreDep, client: CheckoutClientDep, settings: SettingsDep
) -> PaymentService:
    return PaymentService(store, client, currency=settings.currency)


ScheduleLoaderDep = Annotated[ScheduleLoader, Depends(get_schedule_loader)]
SubmissionHandlerDep = Annotated[SubmissionHandler, Depends(get_submission_handler)]
ForumServiceDep = Annotated[ForumService, Depends(get_forum_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
LearningServiceDep = Annotated[LearningService, Depends(get_learning_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]


# Identity
#
# Sign-in is handled by the hosting platform; requests reach this service with
# the signed-in user's ID in X-User-Id and e-mail in X-User-Email. The back
# office authenticates with the shared admin token.


def is_admin_request(
    settings: SettingsDep, authorization: Annotated[str | None, Header()] = None
) -> bool:
    """Whether the request carries the admin bearer token."""
    if not settings.admin_token or not authorization:
        return False
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return False
    return secrets.compare_digest(token.strip(), settings.admin_token)


def require_admin(is_admin: Annotated[bool, Depends(is_admin_request)]) -> None:
    """Dependency that rejects requests without the admin token."""
    if not is_admin:
        raise AdminRequiredError("Admin token required")


def get_current_user(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Dependency that provides the signed-in user's ID."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Sign-in required")
    return x_user_id.strip()


IsAdminDep = Annotated[bool, Depends(is_admin_request)]
CurrentUserDep = Annotated[str, Depends(get_current_user)]
AdminOnly = Depends(require_admin)


def get_viewer(
    is_admin: IsAdminDep,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
) -> Viewer:
    """Dependency that describes who is asking for course content. Never fails."""
    return Viewer(
        user_id=(x_user_id or "").strip() or None,
        email=(x_user_email or "").strip().lower() or None,
        is_admin=is_admin,
    )


ViewerDep = Annotated[Viewer, Depends(get_viewer)]
