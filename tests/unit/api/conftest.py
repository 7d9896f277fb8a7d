"""Fixtures for route tests: a FastAPI app over an in-memory store."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tichnuta.api.app import register_exception_handlers
from tichnuta.api.dependencies import (
    get_chat_events,
    get_checkout_client,
    get_settings,
    get_site_store,
)
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
from tichnuta.chat import ChatEventManager
from tichnuta.config import Settings
from tichnuta.payments import StripeCheckoutClient
from tichnuta.site_store import SiteStore

ADMIN_TOKEN = "admin-secret"


@pytest.fixture
def events() -> ChatEventManager:
    return ChatEventManager()


@pytest.fixture
def stripe() -> MagicMock:
    return MagicMock(spec=StripeCheckoutClient)


@pytest.fixture
def app(store: SiteStore, events: ChatEventManager, stripe: MagicMock):
    """Create a test FastAPI app with mocked dependencies."""
    app = FastAPI()

    def override_get_site_store():
        yield store

    def override_get_chat_events():
        yield events

    def override_get_checkout_client():
        yield stripe

    app.dependency_overrides[get_site_store] = override_get_site_store
    app.dependency_overrides[get_chat_events] = override_get_chat_events
    app.dependency_overrides[get_checkout_client] = override_get_checkout_client
    app.dependency_overrides[get_settings] = lambda: Settings(admin_token=ADMIN_TOKEN)

    register_exception_handlers(app)

    routers = (courses, schedules, lessons, variants, schools, access, registrations)
    for module in (*routers, forum, chat, payments, content):
        app.include_router(module.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def admin() -> dict[str, str]:
    """Headers of a back-office request."""
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user() -> dict[str, str]:
    """Headers of a signed-in site user."""
    return {"X-User-Id": "user-1"}
