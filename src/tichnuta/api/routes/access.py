"""Course access endpoints: revoking granted addresses and the student dashboard."""

from fastapi import APIRouter, status

from tichnuta.api.dependencies import AdminOnly, LearningServiceDep, SiteStoreDep, ViewerDep
from tichnuta.api.models import APIResponse, CourseResponse, course_to_response

router = APIRouter(tags=["access"])


@router.delete(
    "/allowed-emails/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AdminOnly],
)
def delete_allowed_email(entry_id: str, store: SiteStoreDep) -> None:
    """Revoke one address's access to a course."""
    store.delete_allowed_email(entry_id)


@router.get("/me/courses", response_model=APIResponse[list[CourseResponse]])
def my_courses(
    learning: LearningServiceDep, viewer: ViewerDep
) -> APIResponse[list[CourseResponse]]:
    """Courses the caller was granted access to or bought."""
    return APIResponse(data=[course_to_response(c) for c in learning.my_courses(viewer)])
