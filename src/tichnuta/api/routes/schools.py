"""Partner school endpoints."""

from fastapi import APIRouter, Query, status

from tichnuta.api.dependencies import AdminOnly, IsAdminDep, SiteStoreDep
from tichnuta.api.models import (
    APIResponse,
    CourseResponse,
    SchoolCreate,
    SchoolResponse,
    SchoolUpdate,
    course_to_response,
)

router = APIRouter(prefix="/schools", tags=["schools"])


@router.get("", response_model=APIResponse[list[SchoolResponse]])
def list_schools(
    store: SiteStoreDep,
    is_admin: IsAdminDep,
    include_inactive: bool = Query(default=False, description="Include hidden schools (admin)"),
) -> APIResponse[list[SchoolResponse]]:
    """List partner schools in display order."""
    schools = store.list_schools(active_only=not (include_inactive and is_admin))
    return APIResponse(data=[SchoolResponse.model_validate(s) for s in schools])


@router.post(
    "",
    response_model=APIResponse[SchoolResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def create_school(school: SchoolCreate, store: SiteStoreDep) -> APIResponse[SchoolResponse]:
    """Add a partner school."""
    fields = school.model_dump()
    created = store.create_school(fields.pop("name"), **fields)
    return APIResponse(data=SchoolResponse.model_validate(created))


@router.get("/{school_id}", response_model=APIResponse[SchoolResponse])
def get_school(school_id: str, store: SiteStoreDep) -> APIResponse[SchoolResponse]:
    return APIResponse(data=SchoolResponse.model_validate(store.get_school(school_id)))


@router.get("/{school_id}/courses", response_model=APIResponse[list[CourseResponse]])
def list_school_courses(school_id: str, store: SiteStoreDep) -> APIResponse[list[CourseResponse]]:
    """List the active courses offered at a partner school."""
    store.get_school(school_id)
    courses = store.list_courses(active_only=True, school_id=school_id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.patch(
    "/{school_id}", response_model=APIResponse[SchoolResponse], dependencies=[AdminOnly]
)
def update_school(
    school_id: str, school: SchoolUpdate, store: SiteStoreDep
) -> APIResponse[SchoolResponse]:
    """Update a partner school (partial update)."""
    updated = store.update_school(school_id, **school.model_dump(exclude_unset=True))
    return APIResponse(data=SchoolResponse.model_validate(updated))


@router.delete(
    "/{school_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[AdminOnly]
)
def delete_school(school_id: str, store: SiteStoreDep) -> None:
    """Delete a partner school. Its courses stay, without a school."""
    store.delete_school(school_id)
