"""Membership billing — subscription checkout and billing-portal sessions.

Both are thin service functions over the payment gateway. Subscription state
itself only changes when the gateway's webhook reports back.
"""

import structlog
from protean.exceptions import ValidationError

from storefront.errors import UpstreamError
from storefront.gateway import price_id_for_plan
from storefront.gateway.port import CheckoutSession, PaymentGateway, PortalSession
from storefront.membership.profile import Plan, Profile
from storefront.utils.urls import redirect_url

logger = structlog.get_logger(__name__)


def start_subscription_checkout(
    gateway: PaymentGateway,
    plan: str,
    origin: str,
    profile: Profile | None = None,
    success_url: str | None = None,
    cancel_url: str | None = None,
) -> CheckoutSession:
    """Open a subscription session for ``plan``. Guests are allowed."""
    if plan not in {p.value for p in Plan}:
        raise ValidationError({"plan": ['Invalid plan. Must be "monthly" or "annual".']})

    price_id = price_id_for_plan(plan)
    if not price_id:
        raise UpstreamError("stripe", f"No price configured for plan: {plan}")

    metadata = {"plan": plan}
    customer_id = None
    customer_email = None
    if profile is not None:
        metadata["user_id"] = profile.id
        customer_id = profile.stripe_customer_id
        customer_email = None if customer_id else profile.email

    session = gateway.create_subscription_session(
        price_id=price_id,
        success_url=redirect_url(success_url, "/membership/success?session_id={CHECKOUT_SESSION_ID}", origin),
        cancel_url=redirect_url(cancel_url, "/?canceled=true", origin),
        metadata=metadata,
        customer_id=customer_id,
        customer_email=customer_email,
    )
    logger.info(
        "subscription_checkout_started",
        plan=plan,
        session_id=session.id,
        user_id=profile.id if profile else None,
    )
    return session


def open_billing_portal(
    gateway: PaymentGateway,
    profile: Profile,
    origin: str,
    return_url: str | None = None,
) -> PortalSession:
    """Open the self-service portal for a member with a payment customer."""
    if not profile.stripe_customer_id:
        raise ValidationError({"subscription": ["No subscription found. Please subscribe first."]})

    portal = gateway.create_portal_session(
        customer_id=profile.stripe_customer_id,
        return_url=redirect_url(return_url, "/account", origin),
    )
    logger.info("billing_portal_opened", user_id=profile.id)
    return portal
