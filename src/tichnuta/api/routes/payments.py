"""Checkout endpoints for paid online courses."""

from fastapi import APIRouter, Query, Request, status

from tichnuta.api.dependencies import CurrentUserDep, PaymentServiceDep, SiteStoreDep
from tichnuta.api.models import (
    APIResponse,
    PaymentRequest,
    PaymentSessionResponse,
    PaymentVerification,
)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/checkout",
    response_model=APIResponse[PaymentSessionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_checkout(
    body: PaymentRequest,
    request: Request,
    user_id: CurrentUserDep,
    payments: PaymentServiceDep,
) -> APIResponse[PaymentSessionResponse]:
    """Start checkout for a course and return the hosted payment page URL.

    Success and cancel redirects go back to the site the request came from.
    """
    origin = request.headers.get("origin") or str(request.base_url)
    url = payments.create_course_payment(body.course_id, user_id, origin)
    return APIResponse(data=PaymentSessionResponse(url=url))


@router.post("/verify", response_model=APIResponse[PaymentVerification])
def verify_payment(
    payments: PaymentServiceDep,
    session_id: str = Query(..., min_length=1, description="Checkout session ID"),
) -> APIResponse[PaymentVerification]:
    """Record the purchase once the checkout session is paid."""
    purchase = payments.verify_payment(session_id)
    if purchase is None:
        return APIResponse(data=PaymentVerification(paid=False))
    return APIResponse(data=PaymentVerification(paid=True, course_id=purchase.course_id))


@router.get("/courses/{course_id}", response_model=APIResponse[PaymentVerification])
def get_course_access(
    course_id: str, user_id: CurrentUserDep, store: SiteStoreDep
) -> APIResponse[PaymentVerification]:
    """Whether the signed-in user has bought the course."""
    store.get_course(course_id)
    purchase = store.get_completed_purchase(user_id, course_id)
    return APIResponse(data=PaymentVerification(paid=purchase is not None, course_id=course_id))
