"""Domain events for the Order aggregate.

Every status change of an order is recorded as an immutable, versioned fact.
``OrderPaid`` also drives submission to the fulfillment provider.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created from a completed payment session."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    checkout_session_id = String(required=True)
    total_cents = Integer(required=True)
    currency = String(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String()
    total_cents = Integer(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderSubmittedToFulfillment:
    __version__ = 1

    order_id = Identifier(required=True)
    fulfillment_order_id = String(required=True)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderFulfillmentFailed:
    """The fulfillment provider rejected or could not be reached for this order."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = Text(required=True)
    failed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderProcessing:
    __version__ = 1

    order_id = Identifier(required=True)
    processing_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String()
    tracking_url = String()
    carrier = String()
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = Text()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderNeedsAction:
    """The fulfillment provider flagged the order for manual attention."""

    __version__ = 1

    order_id = Identifier(required=True)
    message = Text()
    flagged_at = DateTime(required=True)
