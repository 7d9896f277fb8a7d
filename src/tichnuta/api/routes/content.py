"""Editable site copy and back-office dashboard endpoints."""

from typing import Any

from fastapi import APIRouter

from tichnuta.api.dependencies import AdminOnly, SiteStoreDep
from tichnuta.api.models import APIResponse, SiteCopyUpdate, StatsResponse
from tichnuta.site_copy import get_site_copy, reset_site_copy, update_site_copy

router = APIRouter(tags=["content"])


@router.get("/site-content", response_model=APIResponse[dict[str, Any]])
def read_site_copy(store: SiteStoreDep) -> APIResponse[dict[str, Any]]:
    """The site's texts, with back-office edits applied."""
    return APIResponse(data=get_site_copy(store))


@router.put(
    "/site-content",
    response_model=APIResponse[dict[str, Any]],
    dependencies=[AdminOnly],
)
def edit_site_copy(update: SiteCopyUpdate, store: SiteStoreDep) -> APIResponse[dict[str, Any]]:
    """Edit some of the site's texts."""
    return APIResponse(data=update_site_copy(store, update.values))


@router.delete(
    "/site-content",
    response_model=APIResponse[dict[str, Any]],
    dependencies=[AdminOnly],
)
def restore_site_copy(store: SiteStoreDep) -> APIResponse[dict[str, Any]]:
    """Drop all edits and go back to the default texts."""
    return APIResponse(data=reset_site_copy(store))


@router.get("/admin/stats", response_model=APIResponse[StatsResponse], dependencies=[AdminOnly])
def get_stats(store: SiteStoreDep) -> APIResponse[StatsResponse]:
    """Counters for the back-office dashboard."""
    return APIResponse(
        data=StatsResponse(
            courses=len(store.list_courses(active_only=False)),
            registrations=store.count_registrations_by_status(),
            chat_sessions=len(store.list_chat_sessions()),
        )
    )
