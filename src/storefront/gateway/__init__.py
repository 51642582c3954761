"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production

Without an override a fresh adapter is built from the environment on every
call (``PAYMENT_GATEWAY``, ``STRIPE_SECRET_KEY``, ``STRIPE_WEBHOOK_SECRET``),
so no client instance is shared between requests.
"""

import os

from storefront.errors import UpstreamError
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.stripe_adapter import StripeGateway

_override: PaymentGateway | None = None


def build_gateway() -> PaymentGateway:
    """Build the gateway selected by configuration."""
    name = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if name == "fake":
        return FakeGateway()
    if name == "stripe":
        api_key = os.environ.get("STRIPE_SECRET_KEY")
        if not api_key:
            raise UpstreamError("stripe", "STRIPE_SECRET_KEY is not configured")
        return StripeGateway(api_key=api_key, webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET"))
    raise UpstreamError("payments", f"Unknown payment gateway: {name}")


def get_gateway() -> PaymentGateway:
    """Return the overriding gateway if one is set, else a configured one."""
    if _override is not None:
        return _override
    return build_gateway()


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _override
    _override = gateway


def reset_gateway() -> None:
    """Reset to the configured gateway."""
    global _override
    _override = None


def price_id_for_plan(plan: str) -> str | None:
    """Look up the recurring price configured for a membership plan."""
    return os.environ.get(f"STRIPE_PRICE_{plan.upper()}") or None
