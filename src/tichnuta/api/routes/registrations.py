"""Course registration endpoints."""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from tichnuta.api.dependencies import AdminOnly, SiteStoreDep, SubmissionHandlerDep
from tichnuta.api.models import (
    APIResponse,
    RegistrationCreated,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationStatusUpdate,
    ValidationErrorResponse,
)
from tichnuta.site_store import RegistrationStatus

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post(
    "",
    response_model=APIResponse[RegistrationCreated],
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ValidationErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": APIResponse[None]},
    },
)
def submit_registration(
    form: RegistrationRequest, handler: SubmissionHandlerDep
) -> APIResponse[RegistrationCreated] | JSONResponse:
    """Submit the registration form.

    Invalid fields come back as a 422 with one message per field. A storage
    failure is a 503 carrying the message shown to the visitor.
    """
    result = handler.submit(form.model_dump())
    if result.field_errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ValidationErrorResponse(fields=result.field_errors).model_dump(),
        )
    notification = result.notification
    if not result.ok or result.registration_id is None or notification is None:
        message = notification.description if notification else "Registration failed"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=APIResponse[None](data=None, error=message).model_dump(),
        )
    return APIResponse(
        data=RegistrationCreated(
            id=result.registration_id,
            title=notification.title,
            description=notification.description,
        )
    )


@router.get(
    "",
    response_model=APIResponse[list[RegistrationResponse]],
    dependencies=[AdminOnly],
)
def list_registrations(
    store: SiteStoreDep,
    status_filter: RegistrationStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations, newest first."""
    registrations = store.list_registrations(status=status_filter, limit=limit, offset=offset)
    return APIResponse(data=[RegistrationResponse.model_validate(r) for r in registrations])


@router.get(
    "/{registration_id}",
    response_model=APIResponse[RegistrationResponse],
    dependencies=[AdminOnly],
)
def get_registration(
    registration_id: str, store: SiteStoreDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    registration = store.get_registration(registration_id)
    return APIResponse(data=RegistrationResponse.model_validate(registration))


@router.patch(
    "/{registration_id}",
    response_model=APIResponse[RegistrationResponse],
    dependencies=[AdminOnly],
)
def update_registration_status(
    registration_id: str, update: RegistrationStatusUpdate, store: SiteStoreDep
) -> APIResponse[RegistrationResponse]:
    """Mark a registration as new, contacted or closed."""
    registration = store.update_registration_status(
        registration_id, RegistrationStatus(update.status)
    )
    return APIResponse(data=RegistrationResponse.model_validate(registration))


@router.delete(
    "/{registration_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AdminOnly],
)
def delete_registration(registration_id: str, store: SiteStoreDep) -> None:
    """Delete a registration."""
    store.delete_registration(registration_id)
