"""Domain events for the mirrored catalogue."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductListed:
    """A remote article appeared in the local catalogue for the first time."""

    __version__ = 1

    product_id = Identifier(required=True)
    external_id = String(required=True)
    name = String(required=True)
    listed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDelisted:
    """A product vanished from the remote catalogue and is hidden locally."""

    __version__ = 1

    product_id = Identifier(required=True)
    external_id = String(required=True)
    delisted_at = DateTime(required=True)


@storefront.event(part_of="ProductVariant")
class VariantStockChanged:
    """The cached stock level of a variant changed."""

    __version__ = 1

    variant_id = Identifier(required=True)
    sku = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    is_available = Boolean(required=True)
