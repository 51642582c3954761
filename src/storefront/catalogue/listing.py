"""Read side of the shop: active products with their retail prices.

Prices returned here use the same rounding as checkout, so what a shopper
sees is what they are charged.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, ProductVariant
from storefront.errors import NotFoundError
from storefront.settings.settings import current_markup


def _variant_view(variant: ProductVariant, markup: float) -> dict:
    return {
        "id": str(variant.id),
        "sku": variant.sku,
        "size": variant.size,
        "color": variant.color,
        "appearance_id": variant.appearance_id,
        "price_cents": variant.retail_price_cents(markup),
        "stock_quantity": variant.stock_quantity or 0,
        "is_available": bool(variant.is_available),
    }


def product_view(product: Product, markup: float) -> dict:
    variants = [
        _variant_view(variant, markup)
        for variant in current_domain.repository_for(ProductVariant).for_product(product.id)
    ]
    prices = [variant["price_cents"] for variant in variants]
    return {
        "id": str(product.id),
        "external_id": product.external_id,
        "name": product.name,
        "description": product.description,
        "image_url": product.image_url,
        "images": [image.url for image in product.sorted_images()],
        "min_price_cents": min(prices) if prices else None,
        "is_available": any(variant["is_available"] for variant in variants),
        "variants": variants,
    }


def list_products() -> list[dict]:
    markup = current_markup()
    return [product_view(product, markup) for product in current_domain.repository_for(Product).list_active()]


def get_product(product_id: str) -> dict:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError("Product", product_id) from exc
    if not product.is_active:
        raise NotFoundError("Product", product_id)
    return product_view(product, current_markup())
