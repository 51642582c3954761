"""Product and ProductVariant aggregates mirrored from the fulfillment catalogue.

Products are keyed by the provider's article id, variants by SKU. Both are
overwritten wholesale by the catalogue sync job; nothing else edits them apart
from the stock refresh, which only touches stock levels.
"""

from datetime import UTC, datetime

from protean import atomic_change
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text

from storefront.catalogue.events import ProductDelisted, ProductListed, VariantStockChanged
from storefront.catalogue.pricing import retail_price_cents
from storefront.domain import storefront

# Upper bound for unpaged catalogue reads
MAX_ROWS = 10_000


@storefront.entity(part_of="Product")
class ProductImage:
    """An image URL of a product, ordered as the provider lists them."""

    url = String(required=True, max_length=1000)
    sort_order = Integer(default=0)


@storefront.aggregate
class Product:
    external_id = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    description = Text()
    image_url = String(max_length=1000)
    is_active = Boolean(default=True)
    images = HasMany(ProductImage)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, external_id, name, description=None, image_urls=None):
        now = datetime.now(UTC)
        product = cls(
            external_id=str(external_id),
            name=name,
            description=description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.replace_images(image_urls or [])
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                external_id=product.external_id,
                name=name,
                listed_at=now,
            )
        )
        return product

    def refresh(self, name, description=None, image_urls=None):
        """Overwrite the listing with the provider's current data."""
        self.name = name
        self.description = description
        self.is_active = True
        self.replace_images(image_urls or [])
        self.updated_at = datetime.now(UTC)

    def replace_images(self, image_urls):
        """Reconcile images by URL: keep known ones, drop stale ones, add new ones."""
        wanted = {url: position for position, url in enumerate(image_urls)}

        with atomic_change(self):
            for image in list(self.images):
                if image.url not in wanted:
                    self.remove_images(image)

            known = {image.url: image for image in self.images}
            for url, position in wanted.items():
                if url in known:
                    known[url].sort_order = position
                else:
                    self.add_images(ProductImage(url=url, sort_order=position))

            self.image_url = image_urls[0] if image_urls else None

    def sorted_images(self):
        return sorted(self.images, key=lambda image: image.sort_order or 0)

    def deactivate(self):
        if not self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(
            ProductDelisted(
                product_id=str(self.id),
                external_id=self.external_id,
                delisted_at=now,
            )
        )


@storefront.aggregate
class ProductVariant:
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=100)
    size = String(max_length=100)
    color = String(max_length=100)
    appearance_id = String(max_length=100)
    base_price_cents = Integer(required=True, min_value=0)
    stock_quantity = Integer(default=0, min_value=0)
    is_available = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, product_id, sku, base_price_cents, size=None, color=None, appearance_id=None, stock_quantity=0):
        now = datetime.now(UTC)
        return cls(
            product_id=str(product_id),
            sku=sku,
            size=size,
            color=color,
            appearance_id=appearance_id,
            base_price_cents=base_price_cents,
            stock_quantity=stock_quantity,
            is_available=stock_quantity > 0,
            created_at=now,
            updated_at=now,
        )

    def update_listing(self, product_id, base_price_cents, size=None, color=None, appearance_id=None):
        self.product_id = str(product_id)
        self.base_price_cents = base_price_cents
        self.size = size
        self.color = color
        self.appearance_id = appearance_id
        self.updated_at = datetime.now(UTC)

    def record_stock(self, quantity: int) -> None:
        """Cache the provider's stock level; availability follows it."""
        quantity = max(int(quantity or 0), 0)
        previous = self.stock_quantity or 0

        self.stock_quantity = quantity
        self.is_available = quantity > 0
        self.updated_at = datetime.now(UTC)

        if quantity != previous:
            self.raise_(
                VariantStockChanged(
                    variant_id=str(self.id),
                    sku=self.sku,
                    previous_quantity=previous,
                    new_quantity=quantity,
                    is_available=self.is_available,
                )
            )

    def retail_price_cents(self, markup_percentage: float) -> int:
        return retail_price_cents(self.base_price_cents, markup_percentage)


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_external_id(self, external_id: str) -> Product | None:
        return self._dao.query.filter(external_id=str(external_id)).all().first

    def list_all(self) -> list[Product]:
        return self._dao.query.limit(MAX_ROWS).all().items

    def list_active(self) -> list[Product]:
        products = self._dao.query.filter(is_active=True).limit(MAX_ROWS).all().items
        return sorted(products, key=lambda p: p.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)


@storefront.repository(part_of=ProductVariant)
class ProductVariantRepository:
    def find_by_sku(self, sku: str) -> ProductVariant | None:
        return self._dao.query.filter(sku=sku).all().first

    def for_product(self, product_id: str) -> list[ProductVariant]:
        variants = self._dao.query.filter(product_id=str(product_id)).limit(MAX_ROWS).all().items
        return sorted(variants, key=lambda v: v.sku)

    def list_all(self) -> list[ProductVariant]:
        return self._dao.query.limit(MAX_ROWS).all().items
