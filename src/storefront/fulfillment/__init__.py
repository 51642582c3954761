"""Fulfillment provider factory.

Provides get_fulfillment_provider() / set_fulfillment_provider() to swap
implementations:
- FakeFulfillmentProvider for development and testing
- SpreadConnectClient for production

Without an override a fresh adapter is built from the environment on every
call (``FULFILLMENT_PROVIDER``, ``SPREADCONNECT_API_KEY``,
``SPREADCONNECT_BASE_URL``).
"""

import os

from storefront.errors import UpstreamError
from storefront.fulfillment.fake_adapter import FakeFulfillmentProvider
from storefront.fulfillment.port import FulfillmentProvider
from storefront.fulfillment.spreadconnect import DEFAULT_BASE_URL, SpreadConnectClient

_override: FulfillmentProvider | None = None


def has_api_key() -> bool:
    return bool(os.environ.get("SPREADCONNECT_API_KEY"))


def build_fulfillment_provider() -> FulfillmentProvider:
    """Build the adapter selected by configuration."""
    name = os.environ.get("FULFILLMENT_PROVIDER", "fake").lower()
    if name == "fake":
        return FakeFulfillmentProvider()
    if name == "spreadconnect":
        api_key = os.environ.get("SPREADCONNECT_API_KEY")
        if not api_key:
            raise UpstreamError("spreadconnect", "SPREADCONNECT_API_KEY is not configured")
        return SpreadConnectClient(
            api_key=api_key,
            base_url=os.environ.get("SPREADCONNECT_BASE_URL", DEFAULT_BASE_URL),
        )
    raise UpstreamError("fulfillment", f"Unknown fulfillment provider: {name}")


def get_fulfillment_provider() -> FulfillmentProvider:
    """Return the overriding provider if one is set, else a configured one."""
    if _override is not None:
        return _override
    return build_fulfillment_provider()


def set_fulfillment_provider(provider: FulfillmentProvider) -> None:
    """Override the active fulfillment provider (useful for tests)."""
    global _override
    _override = provider


def reset_fulfillment_provider() -> None:
    global _override
    _override = None
