"""Storefront bounded context — merchandise store, orders and memberships.

Mirrors the print-on-demand catalogue, prices carts server-side, and keeps
orders and membership subscriptions in step with the payment and fulfillment
providers through their webhooks.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
