"""Schedule slot and learning period endpoints."""

from fastapi import APIRouter, status

from tichnuta.api.dependencies import AdminOnly, SiteStoreDep
from tichnuta.api.models import (
    APIResponse,
    PeriodCreate,
    PeriodResponse,
    PeriodUpdate,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)

router = APIRouter(tags=["schedules"])


@router.get("/courses/{course_id}/schedules", response_model=APIResponse[list[ScheduleResponse]])
def list_schedules(course_id: str, store: SiteStoreDep) -> APIResponse[list[ScheduleResponse]]:
    """List a course's schedule slots."""
    store.get_course(course_id)
    slots = store.list_schedules(course_id)
    return APIResponse(data=[ScheduleResponse.model_validate(s) for s in slots])


@router.post(
    "/courses/{course_id}/schedules",
    response_model=APIResponse[ScheduleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def add_schedule(
    course_id: str, slot: ScheduleCreate, store: SiteStoreDep
) -> APIResponse[ScheduleResponse]:
    """Add a schedule slot to a course."""
    created = store.add_schedule(course_id, **slot.model_dump())
    return APIResponse(data=ScheduleResponse.model_validate(created))


@router.patch(
    "/schedules/{schedule_id}",
    response_model=APIResponse[ScheduleResponse],
    dependencies=[AdminOnly],
)
def update_schedule(
    schedule_id: str, slot: ScheduleUpdate, store: SiteStoreDep
) -> APIResponse[ScheduleResponse]:
    """Update a schedule slot."""
    updated = store.update_schedule(schedule_id, **slot.model_dump(exclude_unset=True))
    return APIResponse(data=ScheduleResponse.model_validate(updated))


@router.delete(
    "/schedules/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AdminOnly],
)
def delete_schedule(schedule_id: str, store: SiteStoreDep) -> None:
    """Delete a schedule slot."""
    store.delete_schedule(schedule_id)


@router.get("/courses/{course_id}/periods", response_model=APIResponse[list[PeriodResponse]])
def list_periods(
    course_id: str, store: SiteStoreDep, active_only: bool = False
) -> APIResponse[list[PeriodResponse]]:
    """List a course's learning periods by start date."""
    store.get_course(course_id)
    periods = store.list_periods(course_id, active_only=active_only)
    return APIResponse(data=[PeriodResponse.model_validate(p) for p in periods])


@router.post(
    "/courses/{course_id}/periods",
    response_model=APIResponse[PeriodResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def add_period(
    course_id: str, period: PeriodCreate, store: SiteStoreDep
) -> APIResponse[PeriodResponse]:
    """Add a learning period to a course."""
    created = store.add_period(course_id, **period.model_dump())
    return APIResponse(data=PeriodResponse.model_validate(created))


@router.patch(
    "/periods/{period_id}",
    response_model=APIResponse[PeriodResponse],
    dependencies=[AdminOnly],
)
def update_period(
    period_id: str, period: PeriodUpdate, store: SiteStoreDep
) -> APIResponse[PeriodResponse]:
    """Update a learning period."""
    updated = store.update_period(period_id, **period.model_dump(exclude_unset=True))
    return APIResponse(data=PeriodResponse.model_validate(updated))


@router.delete(
    "/periods/{period_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AdminOnly],
)
def delete_period(period_id: str, store: SiteStoreDep) -> None:
    """Delete a learning period."""
    store.delete_period(period_id)
