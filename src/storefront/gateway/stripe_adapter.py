"""Stripe payment gateway adapter.

Uses the stripe-python SDK with a per-call API key so that no module-level
client state is shared between requests. SDK errors are re-raised as
``UpstreamError``.
"""

import stripe
import structlog

from storefront.errors import UpstreamError
from storefront.gateway.port import CheckoutSession, LineItem, PaymentGateway, PortalSession

logger = structlog.get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str | None) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def _create_checkout_session(self, params: dict) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("stripe_checkout_session_failed", mode=params.get("mode"), error=str(exc))
            raise UpstreamError("stripe", str(exc), upstream_status=exc.http_status) from exc
        return CheckoutSession(id=session.id, url=session.url)

    @staticmethod
    def _customer_params(customer_id: str | None, customer_email: str | None) -> dict:
        if customer_id:
            return {"customer": customer_id}
        if customer_email:
            return {"customer_email": customer_email}
        return {}

    def create_payment_session(
        self,
        line_items: list[LineItem],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        stripe_items = []
        for item in line_items:
            product_data = {"name": item.name, "images": item.images}
            if item.description:
                product_data["description"] = item.description
            stripe_items.append(
                {
                    "price_data": {
                        "currency": item.currency,
                        "product_data": product_data,
                        "unit_amount": item.unit_amount_cents,
                    },
                    "quantity": item.quantity,
                }
            )

        return self._create_checkout_session(
            {
                "mode": "payment",
                "payment_method_types": ["card"],
                "line_items": stripe_items,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
                **self._customer_params(customer_id, customer_email),
            }
        )

    def create_subscription_session(
        self,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        return self._create_checkout_session(
            {
                "mode": "subscription",
                "payment_method_types": ["card"],
                "line_items": [{"price": price_id, "quantity": 1}],
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
                "allow_promotion_codes": True,
                "billing_address_collection": "auto",
                **self._customer_params(customer_id, customer_email),
            }
        )

    def create_portal_session(self, customer_id: str, return_url: str) -> PortalSession:
        try:
            session = stripe.billing_portal.Session.create(
                api_key=self.api_key,
                customer=customer_id,
                return_url=return_url,
            )
        except stripe.StripeError as exc:
            logger.error("stripe_portal_session_failed", customer_id=customer_id, error=str(exc))
            raise UpstreamError("stripe", str(exc), upstream_status=exc.http_status) from exc
        return PortalSession(url=session.url)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        if not self.webhook_secret or not signature:
            return False
        try:
            stripe.WebhookSignature.verify_header(payload.decode("utf-8"), signature, self.webhook_secret)
        except (UnicodeDecodeError, stripe.SignatureVerificationError):
            return False
        return True
