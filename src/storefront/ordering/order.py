"""Order aggregate — a paid merchandise order and its fulfillment progress.

Orders are only ever created from a completed payment session, so they start
life already priced: each OrderItem carries the unit price snapshot computed at
checkout, and the order total is fixed to the sum of those snapshots.

State Machine:
    PENDING → PAID → PROCESSING → SHIPPED → DELIVERED
    PENDING/PAID/PROCESSING → CANCELLED
    DELIVERED and CANCELLED are terminal.

Fulfillment submission is tracked beside the status (fulfillment_order_id,
submitted_at, fulfillment_error) rather than as a status of its own.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.ordering.events import (
    OrderCancelled,
    OrderDelivered,
    OrderFulfillmentFailed,
    OrderNeedsAction,
    OrderPaid,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
    OrderSubmittedToFulfillment,
)

DEFAULT_CURRENCY = "usd"


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

ADDRESS_FIELDS = ("first_name", "last_name", "street", "city", "state", "postal_code", "country", "email", "phone")


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Recipient address captured at checkout. Never updated afterwards."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=2)
    email = String(max_length=254)
    phone = String(max_length=30)

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in ADDRESS_FIELDS}


@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased variant with the unit price it was sold at."""

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(required=True, max_length=100)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price_cents = Integer(required=True, min_value=0)

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    total_cents = Integer(required=True, min_value=0)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    checkout_session_id = String(required=True, unique=True, max_length=255)
    payment_intent_id = String(max_length=255)
    fulfillment_order_id = String(max_length=255)
    fulfillment_error = Text()
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)
    carrier = String(max_length=100)
    cancellation_reason = Text()
    needs_action_message = Text()
    created_at = DateTime()
    paid_at = DateTime()
    submitted_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_item_snapshots(self):
        expected = sum(item.unit_price_cents * item.quantity for item in self.items)
        if self.total_cents != expected:
            raise ValidationError(
                {"total_cents": [f"Order total {self.total_cents} does not match item total {expected}"]}
            )

    @invariant.post
    def order_has_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order needs at least one item"]})

    @classmethod
    def place(
        cls,
        user_id,
        checkout_session_id,
        items_data,
        shipping_address,
        currency=DEFAULT_CURRENCY,
        payment_intent_id=None,
    ):
        """Create a pending order from the item snapshot taken at checkout.

        Args:
            user_id: The buyer's profile id.
            checkout_session_id: The payment session that paid for the order.
            items_data: List of dicts with product_id, variant_id, sku,
                        product_name, quantity, unit_price_cents.
            shipping_address: Dict with the ShippingAddress fields.
        """
        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(item["product_id"]),
                variant_id=str(item["variant_id"]),
                sku=item["sku"],
                product_name=item.get("product_name"),
                quantity=int(item["quantity"]),
                unit_price_cents=int(item["unit_price_cents"]),
            )
            for item in items_data
        ]
        total = sum(item.line_total_cents for item in items)

        order = cls(
            user_id=str(user_id),
            status=OrderStatus.PENDING.value,
            items=items,
            shipping_address=ShippingAddress(**{key: shipping_address.get(key) for key in ADDRESS_FIELDS}),
            total_cents=total,
            currency=(currency or DEFAULT_CURRENCY).lower(),
            checkout_session_id=checkout_session_id,
            payment_intent_id=payment_intent_id,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                checkout_session_id=checkout_session_id,
                total_cents=total,
                currency=order.currency,
                item_count=len(items),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def _transition_to(self, target: OrderStatus) -> bool:
        """Move to ``target``. Returns False when already there."""
        current = OrderStatus(self.status)
        if current == target:
            return False
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        self.status = target.value
        self.updated_at = datetime.now(UTC)
        return True

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_paid(self, payment_intent_id=None) -> bool:
        if not self._transition_to(OrderStatus.PAID):
            return False

        self.paid_at = self.updated_at
        if payment_intent_id:
            self.payment_intent_id = payment_intent_id

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                total_cents=self.total_cents,
                paid_at=self.paid_at,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Fulfillment submission
    # -------------------------------------------------------------------
    @property
    def awaiting_submission(self) -> bool:
        return self.fulfillment_order_id is None and OrderStatus(self.status) == OrderStatus.PAID

    def record_submission(self, fulfillment_order_id: str) -> None:
        if self.fulfillment_order_id:
            raise ValidationError({"fulfillment_order_id": ["Order was already submitted for fulfillment"]})

        now = datetime.now(UTC)
        self.fulfillment_order_id = fulfillment_order_id
        self.fulfillment_error = None
        self.submitted_at = now
        self.updated_at = now

        self.raise_(
            OrderSubmittedToFulfillment(
                order_id=str(self.id),
                fulfillment_order_id=fulfillment_order_id,
                submitted_at=now,
            )
        )

    def record_submission_failure(self, reason: str) -> None:
        now = datetime.now(UTC)
        self.fulfillment_error = reason
        self.updated_at = now

        self.raise_(
            OrderFulfillmentFailed(
                order_id=str(self.id),
                reason=reason,
                failed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Fulfillment progress
    # -------------------------------------------------------------------
    def start_processing(self) -> bool:
        if not self._transition_to(OrderStatus.PROCESSING):
            return False

        self.raise_(OrderProcessing(order_id=str(self.id), processing_at=self.updated_at))
        return True

    def ship(self, tracking_number=None, tracking_url=None, carrier=None) -> bool:
        previous_tracking = (self.tracking_number, self.tracking_url, self.carrier)
        changed = self._transition_to(OrderStatus.SHIPPED)

        # A repeated shipment notice may still carry better tracking data
        self.tracking_number = tracking_number or self.tracking_number
        self.tracking_url = tracking_url or self.tracking_url
        self.carrier = carrier or self.carrier
        if not changed:
            return (self.tracking_number, self.tracking_url, self.carrier) != previous_tracking

        self.shipped_at = self.updated_at
        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                tracking_url=self.tracking_url,
                carrier=self.carrier,
                shipped_at=self.shipped_at,
            )
        )
        return True

    def deliver(self) -> bool:
        if not self._transition_to(OrderStatus.DELIVERED):
            return False

        self.delivered_at = self.updated_at
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=self.delivered_at))
        return True

    def cancel(self, reason=None) -> bool:
        if not self._transition_to(OrderStatus.CANCELLED):
            return False

        self.cancellation_reason = reason
        self.cancelled_at = self.updated_at
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_at=self.cancelled_at,
            )
        )
        return True

    def flag_needs_action(self, message=None) -> bool:
        """Record a provider request for manual attention. Status is unchanged.

        Delivered and cancelled orders are closed, so a late request is rejected.
        """
        if self.is_terminal:
            raise ValidationError({"status": [f"Order is {self.status} and cannot be flagged for action"]})

        now = datetime.now(UTC)
        self.needs_action_message = message
        self.updated_at = now
        self.raise_(
            OrderNeedsAction(
                order_id=str(self.id),
                message=message,
                flagged_at=now,
            )
        )
        return True


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_id(self, order_id: str) -> Order | None:
        return self._dao.query.filter(id=str(order_id)).all().first

    def find_by_checkout_session(self, checkout_session_id: str) -> Order | None:
        return self._dao.query.filter(checkout_session_id=checkout_session_id).all().first

    def for_user(self, user_id: str) -> list[Order]:
        orders = self._dao.query.filter(user_id=str(user_id)).all().items
        return sorted(orders, key=lambda o: o.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)
