"""Fulfillment webhook processing — command and handler.

Maps the fulfillment provider's callbacks onto Order status and tracking
fields. Events are keyed by the local order id the provider echoes back in
``data.reference``:

    order.processed     → processing
    shipment.sent       → shipped, with tracking number, URL and carrier
    shipment.delivered  → delivered
    order.cancelled     → cancelled, with reason
    order.needs-action  → status unchanged, message recorded

Replaying a transition to the current status changes nothing; moving an
order out of a terminal status is rejected.
"""

import json

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.billing.receipt import Outcome
from storefront.domain import storefront
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ProcessFulfillmentEvent:
    """Apply one fulfillment-provider callback to its order."""

    event_type = String(required=True, max_length=100)
    reference = String(max_length=255)
    event_data = Text(required=True)  # JSON of the event's data object


def _processed(order: Order, data: dict) -> bool:  # noqa: ARG001
    return order.start_processing()


def _shipped(order: Order, data: dict) -> bool:
    return order.ship(
        tracking_number=data.get("trackingNumber"),
        tracking_url=data.get("trackingUrl"),
        carrier=data.get("carrier"),
    )


def _delivered(order: Order, data: dict) -> bool:  # noqa: ARG001
    return order.deliver()


def _cancelled(order: Order, data: dict) -> bool:
    return order.cancel(reason=data.get("reason"))


def _needs_action(order: Order, data: dict) -> bool:
    flagged = order.flag_needs_action(data.get("message"))
    logger.warning("order_needs_action", order_id=str(order.id), message=data.get("message"))
    return flagged


TRANSITIONS = {
    "order.processed": _processed,
    "shipment.sent": _shipped,
    "shipment.delivered": _delivered,
    "order.cancelled": _cancelled,
    "order.needs-action": _needs_action,
}


@storefront.command_handler(part_of=Order)
class FulfillmentEventHandler:
    @handle(ProcessFulfillmentEvent)
    def process_fulfillment_event(self, command):
        apply = TRANSITIONS.get(command.event_type)
        if apply is None:
            logger.info("fulfillment_event_ignored", event_type=command.event_type)
            return Outcome.IGNORED.value

        if not command.reference:
            logger.error("fulfillment_event_without_reference", event_type=command.event_type)
            return Outcome.SKIPPED.value

        repo = current_domain.repository_for(Order)
        order = repo.find_by_id(command.reference)
        if order is None:
            logger.warning("fulfillment_event_unknown_order", event_type=command.event_type, reference=command.reference)
            return Outcome.SKIPPED.value

        data = json.loads(command.event_data)
        if not apply(order, data):
            logger.info(
                "fulfillment_event_no_change",
                event_type=command.event_type,
                order_id=str(order.id),
                status=order.status,
            )
            return Outcome.DUPLICATE.value

        repo.add(order)
        logger.info(
            "fulfillment_event_applied",
            event_type=command.event_type,
            order_id=str(order.id),
            status=order.status,
        )
        return Outcome.PROCESSED.value
