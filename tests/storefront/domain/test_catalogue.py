"""Tests for the mirrored Product and ProductVariant aggregates."""

from storefront.catalogue.events import ProductDelisted, ProductListed, VariantStockChanged
from storefront.catalogue.product import Product, ProductVariant


def _product(images=None):
    return Product.create(
        external_id=123,
        name="Logo Tee",
        description="Soft cotton",
        image_urls=images if images is not None else ["https://img/1.png", "https://img/2.png"],
    )


class TestProduct:
    def test_create(self):
        product = _product()
        assert product.external_id == "123"
        assert product.is_active
        assert product.image_url == "https://img/1.png"
        assert [image.url for image in product.sorted_images()] == ["https://img/1.png", "https://img/2.png"]
        assert isinstance(product._events[-1], ProductListed)

    def test_replace_images_reorders_and_drops(self):
        product = _product()
        product.replace_images(["https://img/2.png", "https://img/3.png"])

        assert [image.url for image in product.sorted_images()] == ["https://img/2.png", "https://img/3.png"]
        assert product.image_url == "https://img/2.png"

    def test_product_without_images(self):
        product = _product(images=[])
        assert product.image_url is None
        assert len(product.images) == 0

    def test_refresh_reactivates(self):
        product = _product()
        product.deactivate()
        product.refresh(name="Logo Tee v2")
        assert product.is_active
        assert product.name == "Logo Tee v2"
        assert product.image_url is None

    def test_deactivate_once(self):
        product = _product()
        product._events.clear()
        product.deactivate()
        product.deactivate()
        assert not product.is_active
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductDelisted)


class TestProductVariant:
    def test_availability_follows_stock(self):
        variant = ProductVariant.create(product_id="p1", sku="SKU-1", base_price_cents=1998, stock_quantity=0)
        assert not variant.is_available

        variant.record_stock(4)
        assert variant.is_available
        assert variant.stock_quantity == 4
        event = variant._events[-1]
        assert isinstance(event, VariantStockChanged)
        assert event.new_quantity == 4

    def test_unchanged_stock_raises_no_event(self):
        variant = ProductVariant.create(product_id="p1", sku="SKU-1", base_price_cents=1998, stock_quantity=3)
        variant.record_stock(3)
        assert variant._events == []

    def test_negative_or_missing_stock_counts_as_zero(self):
        variant = ProductVariant.create(product_id="p1", sku="SKU-1", base_price_cents=1998, stock_quantity=3)
        variant.record_stock(None)
        assert variant.stock_quantity == 0
        variant.record_stock(-5)
        assert variant.stock_quantity == 0
        assert not variant.is_available

    def test_retail_price(self):
        variant = ProductVariant.create(product_id="p1", sku="SKU-1", base_price_cents=1998)
        assert variant.retail_price_cents(0.30) == 2597
