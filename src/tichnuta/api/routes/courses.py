"""Course catalog endpoints (public reads, admin writes)."""

from fastapi import APIRouter, Query, status

from tichnuta.api.dependencies import (
    AdminOnly,
    IsAdminDep,
    LearningServiceDep,
    ScheduleLoaderDep,
    SiteStoreDep,
    ViewerDep,
)
from tichnuta.api.models import (
    AllowedEmailResponse,
    AllowedEmailsCreate,
    AllowedEmailsResult,
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    LessonResponse,
    RegistrationOptionsResponse,
    VariantCreate,
    VariantResponse,
    course_to_response,
    lesson_view_to_response,
)
from tichnuta.registration import CourseOffering, RegistrationForm, VariantPrefill
from tichnuta.site_store import VariantNotFoundError

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    store: SiteStoreDep,
    include_inactive: bool = Query(default=False, description="Include hidden courses"),
    school_id: str | None = Query(default=None, description="Only this partner school's courses"),
) -> APIResponse[list[CourseResponse]]:
    """List courses in catalog order."""
    courses = store.list_courses(active_only=not include_inactive, school_id=school_id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def create_course(course: CourseCreate, store: SiteStoreDep) -> APIResponse[CourseResponse]:
    """Create a new course."""
    fields = course.model_dump()
    title = fields.pop("title")
    created = store.create_course(title, **fields)
    return APIResponse(data=course_to_response(created))


@router.get("/{slug_or_id}", response_model=APIResponse[CourseResponse])
def get_course(slug_or_id: str, store: SiteStoreDep) -> APIResponse[CourseResponse]:
    """Get a course by slug or ID."""
    return APIResponse(data=course_to_response(store.find_course(slug_or_id)))


@router.patch(
    "/{course_id}", response_model=APIResponse[CourseResponse], dependencies=[AdminOnly]
)
def update_course(
    course_id: str, course: CourseUpdate, store: SiteStoreDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = store.update_course(course_id, **course.model_dump(exclude_unset=True))
    return APIResponse(data=course_to_response(updated))


@router.delete(
    "/{course_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[AdminOnly]
)
def delete_course(course_id: str, store: SiteStoreDep) -> None:
    """Delete a course with its schedules, periods and lessons."""
    store.delete_course(course_id)


@router.get("/{course_id}/lessons", response_model=APIResponse[list[LessonResponse]])
def list_lessons(
    course_id: str, learning: LearningServiceDep, viewer: ViewerDep
) -> APIResponse[list[LessonResponse]]:
    """List a course's lessons in order.

    Lessons the viewer may not watch come back locked, without video or slides.
    """
    views = learning.list_lessons(course_id, viewer)
    return APIResponse(data=[lesson_view_to_response(view) for view in views])


@router.get("/{course_id}/variants", response_model=APIResponse[list[VariantResponse]])
def list_variants(
    course_id: str,
    store: SiteStoreDep,
    is_admin: IsAdminDep,
    include_inactive: bool = Query(default=False, description="Include hidden variants (admin)"),
) -> APIResponse[list[VariantResponse]]:
    """List a course's variants."""
    store.get_course(course_id)
    variants = store.list_variants(course_id, active_only=not (include_inactive and is_admin))
    return APIResponse(data=[VariantResponse.model_validate(v) for v in variants])


@router.post(
    "/{course_id}/variants",
    response_model=APIResponse[VariantResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def add_variant(
    course_id: str, variant: VariantCreate, store: SiteStoreDep
) -> APIResponse[VariantResponse]:
    """Add a variant to a course."""
    fields = variant.model_dump()
    created = store.add_variant(
        course_id,
        fields.pop("name"),
        fields.pop("gender"),
        fields.pop("location"),
        fields.pop("day_of_week"),
        fields.pop("start_time"),
        **fields,
    )
    return APIResponse(data=VariantResponse.model_validate(created))


@router.get(
    "/{course_id}/allowed-emails",
    response_model=APIResponse[list[AllowedEmailResponse]],
    dependencies=[AdminOnly],
)
def list_allowed_emails(
    course_id: str, store: SiteStoreDep
) -> APIResponse[list[AllowedEmailResponse]]:
    """List the e-mail addresses with access to a course."""
    store.get_course(course_id)
    entries = store.list_allowed_emails(course_id)
    return APIResponse(data=[AllowedEmailResponse.model_validate(e) for e in entries])


@router.post(
    "/{course_id}/allowed-emails",
    response_model=APIResponse[AllowedEmailsResult],
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
)
def add_allowed_emails(
    course_id: str, request: AllowedEmailsCreate, store: SiteStoreDep
) -> APIResponse[AllowedEmailsResult]:
    """Grant course access to e-mail addresses."""
    added, skipped = store.add_allowed_emails(course_id, request.emails)
    return APIResponse(
        data=AllowedEmailsResult(
            added=[AllowedEmailResponse.model_validate(e) for e in added],
            skipped=skipped,
        )
    )


@router.get(
    "/{course_id}/registration-options",
    response_model=APIResponse[RegistrationOptionsResponse],
)
def get_registration_options(
    course_id: str,
    store: SiteStoreDep,
    loader: ScheduleLoaderDep,
    location: str = Query(default="", description="Location chosen so far"),
    variant_id: str | None = Query(default=None, description="Variant to prefill from"),
) -> APIResponse[RegistrationOptionsResponse]:
    """Locations, day/time slots and periods the registration form offers for a course.

    With ``variant_id`` the variant's gender, location, time and period are
    preselected, as when a visitor registers from a variant card.
    """
    offering = CourseOffering.from_row(store.get_course(course_id))
    prefill = None
    if variant_id is not None:
        variant = store.get_variant(variant_id)
        if variant.course_id != offering.id:
            raise VariantNotFoundError(f"Variant with id '{variant_id}' not found")
        prefill = VariantPrefill.from_row(variant)

    form = RegistrationForm([offering])
    ticket = form.select_course(offering.title)
    form.apply_schedules(ticket, loader.fetch_schedules(offering.id))
    form.apply_periods(ticket, loader.fetch_periods(offering.id))
    if prefill is not None:
        form.prefill(prefill)
    if location:
        form.select_location(location)

    options = form.options()
    return APIResponse(
        data=RegistrationOptionsResponse(
            course=options.values.course,
            location=options.values.location,
            time=options.values.time,
            gender=options.values.gender,
            learning_period=options.values.learning_period,
            locations=options.locations,
            time_slots=options.time_slots,
            periods=options.periods,
            location_placeholder=options.location_placeholder,
            time_placeholder=options.time_placeholder,
            period_placeholder=options.period_placeholder,
            time_enabled=options.time_enabled,
        )
    )
