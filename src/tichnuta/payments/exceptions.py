"""Custom exceptions for payments."""


class PaymentError(Exception):
    """Base exception for payment errors."""


class AlreadyPurchasedError(PaymentError):
    """User already owns the course."""


class CheckoutError(PaymentError):
    """The payment provider rejected or failed a request."""


class PaymentNotConfiguredError(PaymentError):
    """No payment provider secret key is configured."""
