"""Fulfillment submission — command, handler and the OrderPaid reaction.

A paid order is pushed to the fulfillment provider (create, then confirm)
with the local order id as its reference. A provider failure never undoes the
payment: it is logged and recorded on the order so an admin can retry.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import UpstreamError
from storefront.fulfillment import get_fulfillment_provider
from storefront.fulfillment.spreadconnect import recipient_from_address
from storefront.ordering.events import OrderPaid
from storefront.ordering.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class SubmitOrderToFulfillment:
    """Send a paid order to the fulfillment provider."""

    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class SubmitOrderHandler:
    @handle(SubmitOrderToFulfillment)
    def submit_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if order.fulfillment_order_id:
            logger.info(
                "order_already_submitted",
                order_id=str(order.id),
                fulfillment_order_id=order.fulfillment_order_id,
            )
            return order.fulfillment_order_id
        if OrderStatus(order.status) != OrderStatus.PAID:
            raise ValidationError({"status": [f"Only paid orders can be submitted, order is {order.status}"]})

        try:
            provider = get_fulfillment_provider()
            fulfillment_order_id = provider.submit_order(
                reference=str(order.id),
                recipient=recipient_from_address(order.shipping_address.to_dict()),
                items=[{"sku": item.sku, "quantity": item.quantity} for item in order.items],
            )
        except UpstreamError as exc:
            logger.error("order_submission_failed", order_id=str(order.id), error=exc.message)
            order.record_submission_failure(exc.message)
            repo.add(order)
            return None

        order.record_submission(fulfillment_order_id)
        repo.add(order)
        logger.info(
            "order_submitted_to_fulfillment",
            order_id=str(order.id),
            fulfillment_order_id=fulfillment_order_id,
        )
        return fulfillment_order_id


@storefront.event_handler(part_of=Order)
class PaidOrderFulfillmentHandler:
    """Submits every newly paid order to the fulfillment provider."""

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        current_domain.process(
            SubmitOrderToFulfillment(order_id=event.order_id),
            asynchronous=False,
        )
