"""Hosted checkout for paid online courses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from tichnuta.logging import sanitize_for_log
from tichnuta.payments.exceptions import (
    AlreadyPurchasedError,
    CheckoutError,
    PaymentNotConfiguredError,
)
from tichnuta.payments.models import CheckoutSession

if TYPE_CHECKING:
    from tichnuta.site_store import SiteStore, UserPurchase

logger = logging.getLogger(__name__)


class StripeCheckoutClient:
    """Minimal client for Stripe Checkout Sessions.

    Uses the REST API directly: form-encoded requests authenticated with the
    secret key.
    """

    def __init__(self, secret_key: str, base_url: str = "https://api.stripe.com") -> None:
        """Initialize the client.

        Args:
            secret_key: Stripe secret key (``sk_...``).
            base_url: API base URL (for testing).
        """
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Stripe API."""
        if self._client is None:
            if not self.secret_key:
                raise PaymentNotConfiguredError("Stripe secret key is not configured")
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = self.client.request(method, path, data=data)
        except httpx.HTTPError as e:
            raise CheckoutError(f"Stripe request failed: {e}") from e

        if response.status_code != 200:
            raise CheckoutError(
                f"Stripe request failed: {response.status_code} - "
                f"{sanitize_for_log(response.text)}"
            )
        payload: dict[str, Any] = response.json()
        return payload

    def create_session(
        self,
        name: str,
        description: str,
        unit_amount: int,
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """Create a one-item payment checkout session.

        Args:
            name: Product name shown on the checkout page.
            description: Product description (omitted when empty).
            unit_amount: Price in the currency's minor unit.
            currency: ISO currency code.
            success_url: Redirect after payment; may contain ``{CHECKOUT_SESSION_ID}``.
            cancel_url: Redirect when the buyer cancels.
            metadata: Key/values stored on the session.

        Raises:
            CheckoutError: If Stripe rejects the request.
        """
        form: dict[str, Any] = {
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "line_items[0][quantity]": 1,
            "line_items[0][price_data][currency]": currency,
            "line_items[0][price_data][unit_amount]": unit_amount,
            "line_items[0][price_data][product_data][name]": name,
        }
        if description:
            form["line_items[0][price_data][product_data][description]"] = description
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value

        data = self._request("POST", "/v1/checkout/sessions", data=form)
        return _to_session(data)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session.

        Raises:
            CheckoutError: If Stripe rejects the request.
        """
        return _to_session(self._request("GET", f"/v1/checkout/sessions/{session_id}"))


def _to_session(data: dict[str, Any]) -> CheckoutSession:
    return CheckoutSession(
        id=data["id"],
        url=data.get("url"),
        payment_status=data.get("payment_status") or "unpaid",
        metadata=dict(data.get("metadata") or {}),
    )


class PaymentService:
    """Creates checkout sessions for courses and records purchases."""

    def __init__(
        self, store: SiteStore, client: StripeCheckoutClient, currency: str = "ils"
    ) -> None:
        self._store = store
        self._client = client
        self._currency = currency

    def create_course_payment(self, course_id: str, user_id: str, origin: str) -> str:
        """Start checkout for a course.

        Args:
            course_id: Course being bought.
            user_id: Buyer.
            origin: Site origin used for the success and cancel URLs.

        Returns:
            URL of the hosted checkout page.

        Raises:
            CourseNotFoundError: If course doesn't exist.
            AlreadyPurchasedError: If the user already completed a purchase of it.
            CheckoutError: If the payment provider fails.
        """
        course = self._store.get_course(course_id)
        if self._store.get_completed_purchase(user_id, course_id) is not None:
            raise AlreadyPurchasedError(f"Course '{course_id}' already purchased")

        origin = origin.rstrip("/")
        amount = course.price_number * 100
        session = self._client.create_session(
            name=f"{course.title} - {course.subtitle}" if course.subtitle else course.title,
            description=course.description,
            unit_amount=amount,
            currency=self._currency,
            success_url=f"{origin}/course/{course_id}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/course/{course_id}",
            metadata={"courseId": course_id, "userId": user_id},
        )
        if not session.url:
            raise CheckoutError(f"Checkout session {session.id} has no URL")

        self._store.create_purchase(
            user_id=user_id,
            course_id=course_id,
            stripe_session_id=session.id,
            amount_paid=amount,
            currency=self._currency.upper(),
        )
        logger.info("Checkout %s started for course %s by %s", session.id, course_id, user_id)
        return session.url

    def verify_payment(self, session_id: str) -> UserPurchase | None:
        """Complete the purchase for a paid checkout session.

        Returns:
            The completed purchase, or None while the session is unpaid.

        Raises:
            PurchaseNotFoundError: If no purchase was started for the session.
            CheckoutError: If the payment provider fails.
        """
        session = self._client.retrieve_session(session_id)
        if not session.is_paid:
            logger.info("Checkout %s not paid yet (%s)", session_id, session.payment_status)
            return None
        purchase = self._store.complete_purchase(session_id)
        logger.info("Purchase %s completed for course %s", purchase.id, purchase.course_id)
        return purchase
