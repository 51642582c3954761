"""Catalogue sync — command and handler.

A full, last-write-wins refresh of the local mirror from the fulfillment
provider: every article page is fetched, then the stock map, and each
article is upserted as a Product (keyed by external id) with its images and
its variants (keyed by SKU). Products that no longer exist remotely are
deactivated rather than deleted, so past order items keep their references.

Running the sync twice against an unchanged catalogue leaves row counts
unchanged.
"""

from dataclasses import asdict, dataclass, field

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Integer
from protean.utils.globals import current_domain

from storefront.catalogue.pricing import to_cents
from storefront.catalogue.product import Product, ProductVariant
from storefront.domain import storefront
from storefront.fulfillment import get_fulfillment_provider
from storefront.fulfillment.port import Article, FulfillmentProvider

logger = structlog.get_logger(__name__)

ARTICLE_PAGE_SIZE = 100
STOCK_PAGE_SIZE = 1000


@dataclass
class SyncSummary:
    products_added: int = 0
    products_updated: int = 0
    products_deactivated: int = 0
    variants_added: int = 0
    variants_updated: int = 0
    total_articles: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def fetch_all_articles(provider: FulfillmentProvider, page_size: int = ARTICLE_PAGE_SIZE) -> list[Article]:
    articles: list[Article] = []
    offset = 0
    while True:
        page = provider.list_articles(limit=page_size, offset=offset)
        articles.extend(page.items)
        offset += len(page.items)
        if not page.items or offset >= page.count:
            return articles


def fetch_all_stock(provider: FulfillmentProvider, page_size: int = STOCK_PAGE_SIZE) -> dict[str, int]:
    stock: dict[str, int] = {}
    offset = 0
    while True:
        page = provider.get_stock(limit=page_size, offset=offset)
        stock.update(page.items)
        offset += len(page.items)
        if not page.items or offset >= page.count:
            return stock


def _upsert_product(article: Article, summary: SyncSummary) -> Product:
    products = current_domain.repository_for(Product)
    product = products.find_by_external_id(article.id)

    if product is None:
        product = Product.create(
            external_id=article.id,
            name=article.name,
            description=article.description,
            image_urls=article.images,
        )
        summary.products_added += 1
    else:
        product.refresh(name=article.name, description=article.description, image_urls=article.images)
        summary.products_updated += 1

    products.add(product)
    return product


def _upsert_variants(product: Product, article: Article, stock: dict[str, int], summary: SyncSummary) -> None:
    variants = current_domain.repository_for(ProductVariant)

    for remote in article.variants:
        quantity = stock.get(remote.sku, remote.stock or 0)
        base_price_cents = to_cents(remote.price)
        variant = variants.find_by_sku(remote.sku)

        if variant is None:
            variant = ProductVariant.create(
                product_id=product.id,
                sku=remote.sku,
                base_price_cents=base_price_cents,
                size=remote.size_id,
                color=remote.appearance_id,
                appearance_id=remote.appearance_id,
                stock_quantity=quantity,
            )
            summary.variants_added += 1
        else:
            variant.update_listing(
                product_id=product.id,
                base_price_cents=base_price_cents,
                size=remote.size_id,
                color=remote.appearance_id,
                appearance_id=remote.appearance_id,
            )
            variant.record_stock(quantity)
            summary.variants_updated += 1

        variants.add(variant)


def _deactivate_missing(seen_external_ids: set[str], summary: SyncSummary) -> None:
    products = current_domain.repository_for(Product)
    for product in products.list_all():
        if product.is_active and product.external_id not in seen_external_ids:
            product.deactivate()
            products.add(product)
            summary.products_deactivated += 1
            logger.info("product_delisted", product_id=str(product.id), external_id=product.external_id)


@storefront.command(part_of="Product")
class SyncCatalogue:
    """Refresh the whole catalogue mirror from the fulfillment provider."""

    page_size = Integer(default=ARTICLE_PAGE_SIZE, min_value=1, max_value=ARTICLE_PAGE_SIZE)


@storefront.command_handler(part_of=Product)
class SyncCatalogueHandler:
    @handle(SyncCatalogue)
    def sync_catalogue(self, command):
        provider = get_fulfillment_provider()

        articles = fetch_all_articles(provider, page_size=command.page_size or ARTICLE_PAGE_SIZE)
        stock = fetch_all_stock(provider)
        logger.info("catalogue_sync_started", articles=len(articles), stock_entries=len(stock))

        summary = SyncSummary(total_articles=len(articles))
        seen: set[str] = set()
        for article in articles:
            seen.add(article.id)
            if not article.variants:
                logger.warning("article_without_variants", external_id=article.id, name=article.name)
            try:
                product = _upsert_product(article, summary)
                _upsert_variants(product, article, stock, summary)
            except ValidationError as exc:
                summary.errors.append(f"{article.id}: {exc.messages}")
                logger.error("article_sync_failed", external_id=article.id, errors=exc.messages)

        _deactivate_missing(seen, summary)

        logger.info("catalogue_sync_completed", **{k: v for k, v in summary.to_dict().items() if k != "errors"})
        return summary.to_dict()
