"""Application tests for the catalogue sync."""

from protean import current_domain
from storefront.catalogue.product import Product, ProductVariant
from storefront.catalogue.sync import SyncCatalogue
from storefront.fulfillment.port import Article, ArticleVariant


def _article(article_id="a1", name="Logo Tee", skus=("A1-S", "A1-M"), price=19.98):
    return Article(
        id=article_id,
        name=name,
        description=f"{name} description",
        variants=[ArticleVariant(sku=sku, appearance_id="black", size_id=sku[-1], price=price) for sku in skus],
        images=[f"https://img.example.com/{article_id}.png"],
    )


def _sync(page_size=None):
    command = SyncCatalogue(page_size=page_size) if page_size else SyncCatalogue()
    return current_domain.process(command, asynchronous=False)


def _counts():
    return (
        len(current_domain.repository_for(Product).list_all()),
        len(current_domain.repository_for(ProductVariant).list_all()),
    )


class TestFirstSync:
    def test_products_and_variants_are_created(self, fake_provider):
        fake_provider.articles = [_article()]
        fake_provider.stock = {"A1-S": 0, "A1-M": 7}

        summary = _sync()

        assert summary["products_added"] == 1
        assert summary["variants_added"] == 2
        assert summary["total_articles"] == 1
        assert summary["errors"] == []

        product = current_domain.repository_for(Product).find_by_external_id("a1")
        assert product.name == "Logo Tee"
        assert product.image_url == "https://img.example.com/a1.png"

        medium = current_domain.repository_for(ProductVariant).find_by_sku("A1-M")
        assert medium.product_id == product.id
        assert medium.base_price_cents == 1998
        assert medium.stock_quantity == 7
        assert medium.is_available
        assert not current_domain.repository_for(ProductVariant).find_by_sku("A1-S").is_available

    def test_variant_stock_used_when_absent_from_stock_map(self, fake_provider):
        fake_provider.articles = [
            Article(id="a1", name="Mug", variants=[ArticleVariant(sku="MUG", price=8, stock=3)]),
        ]

        _sync()

        assert current_domain.repository_for(ProductVariant).find_by_sku("MUG").stock_quantity == 3

    def test_articles_are_paged(self, fake_provider):
        fake_provider.articles = [_article(f"a{i}", skus=(f"S{i}",)) for i in range(5)]

        summary = _sync(page_size=2)

        assert summary["products_added"] == 5
        pages = [call for call in fake_provider.calls if call["method"] == "list_articles"]
        assert [call["offset"] for call in pages] == [0, 2, 4]

    def test_stock_map_is_paged(self, fake_provider):
        fake_provider.articles = [_article("a1", skus=("TARGET",))]
        fake_provider.stock = {f"FILLER-{i}": 1 for i in range(1000)}
        fake_provider.stock["TARGET"] = 7

        _sync()

        target = current_domain.repository_for(ProductVariant).find_by_sku("TARGET")
        assert target.stock_quantity == 7
        assert target.is_available
        pages = [call for call in fake_provider.calls if call["method"] == "get_stock"]
        assert [call["offset"] for call in pages] == [0, 1000]


class TestRepeatedSync:
    def test_second_sync_keeps_row_counts(self, fake_provider):
        fake_provider.articles = [_article("a1"), _article("a2", skus=("A2-M",))]
        _sync()
        before = _counts()

        summary = _sync()

        assert _counts() == before == (2, 3)
        assert summary["products_added"] == 0
        assert summary["products_updated"] == 2
        assert summary["variants_added"] == 0
        assert summary["variants_updated"] == 3

    def test_remote_changes_overwrite_local(self, fake_provider):
        fake_provider.articles = [_article(price=19.98)]
        _sync()

        fake_provider.articles = [_article(name="Logo Tee 2", price=21.5)]
        fake_provider.stock = {"A1-M": 2}
        _sync()

        assert current_domain.repository_for(Product).find_by_external_id("a1").name == "Logo Tee 2"
        medium = current_domain.repository_for(ProductVariant).find_by_sku("A1-M")
        assert medium.base_price_cents == 2150
        assert medium.stock_quantity == 2

    def test_missing_article_is_deactivated(self, fake_provider):
        fake_provider.articles = [_article("a1"), _article("a2", skus=("A2-M",))]
        _sync()

        fake_provider.articles = [_article("a1")]
        summary = _sync()

        assert summary["products_deactivated"] == 1
        assert not current_domain.repository_for(Product).find_by_external_id("a2").is_active
        assert [p.external_id for p in current_domain.repository_for(Product).list_active()] == ["a1"]
        assert _counts() == (2, 3)

    def test_returning_article_is_reactivated(self, fake_provider):
        fake_provider.articles = [_article("a1")]
        _sync()
        fake_provider.articles = []
        _sync()

        fake_provider.articles = [_article("a1")]
        _sync()

        assert current_domain.repository_for(Product).find_by_external_id("a1").is_active
