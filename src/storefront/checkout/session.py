"""Checkout session initiator.

Verifies a cart against the local catalogue mirror, prices every line on the
server from the variant's base price and the stored markup, and opens a hosted
payment session. Nothing is persisted here: the session metadata carries the
item and address snapshot until the payment webhook creates the order.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, ProductVariant
from storefront.checkout.snapshot import write_snapshot
from storefront.errors import NotFoundError, OutOfStockError
from storefront.gateway.port import LineItem, PaymentGateway
from storefront.membership.profile import Profile
from storefront.ordering.order import DEFAULT_CURRENCY
from storefront.settings.settings import current_markup
from storefront.utils.urls import redirect_url

logger = structlog.get_logger(__name__)

ORDER_TYPE_SHOP = "shop"
REQUIRED_ADDRESS_FIELDS = ("first_name", "last_name", "street", "city", "postal_code", "country")
MAX_QUANTITY = 100


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    url: str
    total_cents: int


def _validate_cart(items: list[dict], shipping_address: dict | None) -> None:
    if not items:
        raise ValidationError({"items": ["Cart is empty"]})

    for item in items:
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or quantity < 1 or quantity > MAX_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {MAX_QUANTITY}"]})
        if not item.get("variant_id"):
            raise ValidationError({"variant_id": ["Variant id is required"]})

    if not shipping_address:
        raise ValidationError({"shipping_address": ["Shipping address is required"]})
    missing = [field for field in REQUIRED_ADDRESS_FIELDS if not (shipping_address.get(field) or "").strip()]
    if missing:
        raise ValidationError({"shipping_address": [f"Invalid shipping address, missing: {', '.join(missing)}"]})
    if len(shipping_address["country"].strip()) != 2:
        raise ValidationError({"shipping_address": ["Country must be a two-letter ISO code"]})


def _load_sellable(variant_id: str) -> tuple[ProductVariant, Product]:
    try:
        variant = current_domain.repository_for(ProductVariant).get(variant_id)
        product = current_domain.repository_for(Product).get(variant.product_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError("Product variant", variant_id) from exc

    if not variant.is_available or not product.is_active:
        raise OutOfStockError(variant_id, product_name=product.name)
    return variant, product


def price_cart(items: list[dict]) -> list[dict]:
    """Return the verified item snapshot with server-side unit prices."""
    markup = current_markup()
    verified = []
    for item in items:
        variant, product = _load_sellable(item["variant_id"])
        verified.append(
            {
                "variant_id": str(variant.id),
                "product_id": str(product.id),
                "sku": variant.sku,
                "product_name": product.name,
                "size": variant.size,
                "color": variant.color,
                "image_url": product.image_url,
                "quantity": item["quantity"],
                "unit_price_cents": variant.retail_price_cents(markup),
            }
        )
    return verified


def create_checkout_session(
    gateway: PaymentGateway,
    user_id: str,
    items: list[dict],
    shipping_address: dict,
    origin: str,
    user_email: str | None = None,
) -> CheckoutResult:
    """Price the cart and open a payment session for it.

    Args:
        items: List of dicts with ``variant_id`` and ``quantity``. Any price
               sent along is ignored.
        shipping_address: Dict with first_name, last_name, street, city,
               postal_code, country and optionally state, email, phone.
    """
    _validate_cart(items, shipping_address)
    address = {key: value.strip() if isinstance(value, str) else value for key, value in shipping_address.items()}
    address["country"] = address["country"].upper()

    verified = price_cart(items)
    total_cents = sum(item["unit_price_cents"] * item["quantity"] for item in verified)

    line_items = [
        LineItem(
            name=item["product_name"],
            description=f"Size: {item['size'] or '-'}, Color: {item['color'] or '-'}",
            unit_amount_cents=item["unit_price_cents"],
            quantity=item["quantity"],
            currency=DEFAULT_CURRENCY,
            images=[item["image_url"]] if item["image_url"] else [],
        )
        for item in verified
    ]

    metadata = {"user_id": str(user_id), "order_type": ORDER_TYPE_SHOP}
    snapshot = [
        {key: item[key] for key in ("variant_id", "product_id", "sku", "product_name", "quantity", "unit_price_cents")}
        for item in verified
    ]
    try:
        write_snapshot(metadata, "items", snapshot)
        write_snapshot(metadata, "shipping_address", address)
    except ValueError as exc:
        raise ValidationError({"items": ["Cart is too large for a single checkout"]}) from exc

    profile = current_domain.repository_for(Profile).find_by_id(user_id)
    customer_id = profile.stripe_customer_id if profile else None
    customer_email = None
    if not customer_id:
        customer_email = user_email or (profile.email if profile else None) or address.get("email")

    session = gateway.create_payment_session(
        line_items=line_items,
        success_url=redirect_url(None, "/shop/orders/success?session_id={CHECKOUT_SESSION_ID}", origin),
        cancel_url=redirect_url(None, "/shop/checkout?canceled=true", origin),
        metadata=metadata,
        customer_id=customer_id,
        customer_email=customer_email,
    )

    logger.info(
        "checkout_session_created",
        user_id=str(user_id),
        session_id=session.id,
        item_count=len(verified),
        total_cents=total_cents,
    )
    return CheckoutResult(session_id=session.id, url=session.url, total_cents=total_cents)
