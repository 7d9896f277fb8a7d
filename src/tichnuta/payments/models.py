"""Data models for payments."""

from dataclasses import dataclass, field


@dataclass
class CheckoutSession:
    """A hosted checkout session as returned by the payment provider."""

    id: str
    url: str | None = None
    payment_status: str = "unpaid"
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"
