"""Retail pricing for mirrored catalogue variants.

All amounts are integer cents. The retail price is the fulfillment base price
plus the shop's markup, rounded half-up to the nearest cent, and is always
computed here on the server; prices sent by a client are never trusted.
"""

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_MARKUP_PERCENTAGE = 0.30
MAX_MARKUP_PERCENTAGE = 10.0


def retail_price_cents(base_price_cents: int, markup_percentage: float) -> int:
    """Apply ``markup_percentage`` (a fraction, 0.30 == 30%) to a base price."""
    price = Decimal(base_price_cents) * (Decimal(1) + Decimal(str(markup_percentage)))
    return int(price.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount) -> int:
    """Convert a provider amount in currency units (19.98) into cents (1998)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
