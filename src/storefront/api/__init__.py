"""Storefront API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import account_router, admin_router, billing_router, shop_router
from storefront.api.webhooks import fulfillment_webhook_router, payment_webhook_router

__all__ = [
    "account_router",
    "admin_router",
    "billing_router",
    "fulfillment_webhook_router",
    "payment_webhook_router",
    "register_error_handlers",
    "shop_router",
]
