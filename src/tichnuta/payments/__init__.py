"""Payments - hosted checkout for paid online courses."""

from tichnuta.payments.checkout import PaymentService, StripeCheckoutClient
from tichnuta.payments.exceptions import (
    AlreadyPurchasedError,
    CheckoutError,
    PaymentError,
    PaymentNotConfiguredError,
)
from tichnuta.payments.models import CheckoutSession

__all__ = [
    "AlreadyPurchasedError",
    "CheckoutError",
    "CheckoutSession",
    "PaymentError",
    "PaymentNotConfiguredError",
    "PaymentService",
    "StripeCheckoutClient",
]
