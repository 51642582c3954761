"""Stock refresh — command and handler.

Checks the live stock of specific SKUs and writes it into the cached variant
rows. A SKU whose lookup fails counts as out of stock.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import List, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import ProductVariant
from storefront.domain import storefront
from storefront.errors import UpstreamError
from storefront.fulfillment import get_fulfillment_provider

logger = structlog.get_logger(__name__)

MAX_SKUS = 100


@storefront.command(part_of="ProductVariant")
class RefreshStock:
    skus = List(content_type=String, required=True)


@storefront.command_handler(part_of=ProductVariant)
class RefreshStockHandler:
    @handle(RefreshStock)
    def refresh_stock(self, command):
        provider = get_fulfillment_provider()
        variants = current_domain.repository_for(ProductVariant)

        stock: dict[str, int] = {}
        for sku in dict.fromkeys(command.skus):
            try:
                stock[sku] = provider.get_stock_by_sku(sku)
            except UpstreamError as exc:
                logger.warning("stock_lookup_failed", sku=sku, error=exc.message)
                stock[sku] = 0

            variant = variants.find_by_sku(sku)
            if variant is not None:
                variant.record_stock(stock[sku])
                variants.add(variant)

        return {"stock": stock, "cached_at": datetime.now(UTC).isoformat()}
