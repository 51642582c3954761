"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and StripeGateway
(production) without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class LineItem:
    """One priced line of a hosted payment page. Amounts are in cents."""

    name: str
    unit_amount_cents: int
    quantity: int
    currency: str = "usd"
    description: str | None = None
    images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CheckoutSession:
    """A hosted payment session the customer is redirected to."""

    id: str
    url: str


@dataclass(frozen=True)
class PortalSession:
    url: str


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_session(
        self,
        line_items: list[LineItem],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        """Open a one-off payment session for the given line items."""
        ...

    @abstractmethod
    def create_subscription_session(
        self,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        """Open a subscription session for a recurring price."""
        ...

    @abstractmethod
    def create_portal_session(self, customer_id: str, return_url: str) -> PortalSession:
        """Open a self-service billing portal session for a customer."""
        ...

    @abstractmethod
    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
    ) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...
