"""Payment webhook processing — command and handler.

Drives Order and Profile state from verified payment-provider events. The
signature has already been checked by the HTTP layer; this handler only sees
events it can trust.

    checkout.session.completed     shop order placed and paid, or membership activated
    customer.subscription.updated  remote status mapped onto the local vocabulary
    customer.subscription.deleted  subscription cleared, status canceled
    invoice.payment_failed         status past_due

Every event id is recorded in the WebhookReceipt ledger; a replayed id is
acknowledged without touching any state.
"""

import json

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.billing.receipt import Outcome, WebhookReceipt
from storefront.checkout.session import ORDER_TYPE_SHOP
from storefront.checkout.snapshot import read_snapshot
from storefront.domain import storefront
from storefront.membership.profile import Profile, SubscriptionStatus, map_remote_status
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)

PROVIDER = "stripe"


@storefront.command(part_of="WebhookReceipt")
class ProcessPaymentEvent:
    """Apply one verified payment-provider event."""

    event_id = String(required=True, max_length=255)
    event_type = String(required=True, max_length=100)
    event_data = Text(required=True)  # JSON of the event's data.object


def _place_shop_order(session: dict) -> Outcome:
    metadata = session.get("metadata") or {}
    user_id = metadata.get("user_id")
    items = read_snapshot(metadata, "items")
    address = read_snapshot(metadata, "shipping_address")
    if not user_id or not items or not address:
        logger.error("shop_order_metadata_missing", session_id=session.get("id"))
        return Outcome.SKIPPED

    orders = current_domain.repository_for(Order)
    order = orders.find_by_checkout_session(session["id"])
    if order is not None:
        logger.info("shop_order_already_recorded", session_id=session["id"], order_id=str(order.id))
        if order.mark_paid(session.get("payment_intent")):
            orders.add(order)
        return Outcome.DUPLICATE

    order = Order.place(
        user_id=user_id,
        checkout_session_id=session["id"],
        items_data=items,
        shipping_address=address,
        currency=session.get("currency"),
        payment_intent_id=session.get("payment_intent"),
    )
    amount_total = session.get("amount_total")
    if amount_total is not None and amount_total != order.total_cents:
        logger.warning(
            "shop_order_amount_mismatch",
            order_id=str(order.id),
            session_id=session["id"],
            charged_cents=amount_total,
            total_cents=order.total_cents,
        )

    order.mark_paid(session.get("payment_intent"))
    orders.add(order)
    logger.info(
        "shop_order_paid",
        order_id=str(order.id),
        session_id=session["id"],
        user_id=user_id,
        total_cents=order.total_cents,
    )
    return Outcome.PROCESSED


def _activate_subscription(session: dict) -> Outcome:
    metadata = session.get("metadata") or {}
    profiles = current_domain.repository_for(Profile)
    email = session.get("customer_email") or (session.get("customer_details") or {}).get("email")

    profile = None
    if metadata.get("user_id"):
        profile = profiles.find_by_id(metadata["user_id"])
    if profile is None:
        profile = profiles.find_by_email(email)
    if profile is None:
        logger.warning(
            "subscription_profile_not_found",
            session_id=session.get("id"),
            user_id=metadata.get("user_id"),
            email=email,
        )
        return Outcome.SKIPPED

    profile.activate_subscription(
        customer_id=session.get("customer"),
        subscription_id=session.get("subscription"),
        plan=metadata.get("plan"),
    )
    profiles.add(profile)
    logger.info("subscription_activated", user_id=profile.id, plan=profile.subscription_plan)
    return Outcome.PROCESSED


def on_checkout_completed(session: dict) -> Outcome:
    if (session.get("metadata") or {}).get("order_type") == ORDER_TYPE_SHOP:
        return _place_shop_order(session)
    return _activate_subscription(session)


def _profile_for_subscription(subscription_id: str | None) -> Profile | None:
    profile = current_domain.repository_for(Profile).find_by_subscription_id(subscription_id)
    if profile is None:
        logger.warning("subscription_not_linked", subscription_id=subscription_id)
    return profile


def on_subscription_updated(subscription: dict) -> Outcome:
    profile = _profile_for_subscription(subscription.get("id"))
    if profile is None:
        return Outcome.SKIPPED

    status = map_remote_status(subscription.get("status"))
    if profile.change_subscription_status(status):
        current_domain.repository_for(Profile).add(profile)
    logger.info("subscription_status_synced", user_id=profile.id, remote=subscription.get("status"), local=status.value)
    return Outcome.PROCESSED


def on_subscription_deleted(subscription: dict) -> Outcome:
    profile = _profile_for_subscription(subscription.get("id"))
    if profile is None:
        return Outcome.SKIPPED

    profile.end_subscription()
    current_domain.repository_for(Profile).add(profile)
    logger.info("subscription_ended", user_id=profile.id)
    return Outcome.PROCESSED


def invoice_subscription_id(invoice: dict) -> str | None:
    """Newer API versions nest the subscription under ``parent``."""
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription") or invoice.get("subscription")


def on_payment_failed(invoice: dict) -> Outcome:
    subscription_id = invoice_subscription_id(invoice)
    if not subscription_id:
        logger.info("payment_failed_without_subscription", invoice_id=invoice.get("id"))
        return Outcome.SKIPPED

    profile = _profile_for_subscription(subscription_id)
    if profile is None:
        return Outcome.SKIPPED

    if profile.change_subscription_status(SubscriptionStatus.PAST_DUE):
        current_domain.repository_for(Profile).add(profile)
    logger.warning("subscription_past_due", user_id=profile.id, invoice_id=invoice.get("id"))
    return Outcome.PROCESSED


EVENT_HANDLERS = {
    "checkout.session.completed": on_checkout_completed,
    "customer.subscription.updated": on_subscription_updated,
    "customer.subscription.deleted": on_subscription_deleted,
    "invoice.payment_failed": on_payment_failed,
}


@storefront.command_handler(part_of=WebhookReceipt)
class PaymentEventHandler:
    @handle(ProcessPaymentEvent)
    def process_payment_event(self, command):
        receipts = current_domain.repository_for(WebhookReceipt)
        if receipts.seen(command.event_id):
            logger.info("payment_event_replayed", event_id=command.event_id, event_type=command.event_type)
            return Outcome.DUPLICATE.value

        handler = EVENT_HANDLERS.get(command.event_type)
        if handler is None:
            logger.info("payment_event_ignored", event_id=command.event_id, event_type=command.event_type)
            outcome = Outcome.IGNORED
        else:
            outcome = handler(json.loads(command.event_data))

        receipts.add(WebhookReceipt.record(command.event_id, PROVIDER, command.event_type, outcome))
        return outcome.value
