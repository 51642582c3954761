"""Application tests for the live stock refresh."""

from protean import current_domain
from storefront.catalogue.product import ProductVariant
from storefront.catalogue.stock import RefreshStock


def _refresh(*skus):
    return current_domain.process(RefreshStock(skus=list(skus)), asynchronous=False)


class TestRefreshStock:
    def test_stock_is_cached_on_variants(self, make_product, fake_provider):
        make_product(sku="TEE-M", stock=0)
        fake_provider.stock = {"TEE-M": 12}

        result = _refresh("TEE-M")

        assert result["stock"] == {"TEE-M": 12}
        assert result["cached_at"]
        variant = current_domain.repository_for(ProductVariant).find_by_sku("TEE-M")
        assert variant.stock_quantity == 12
        assert variant.is_available

    def test_sold_out_variant_becomes_unavailable(self, make_product, fake_provider):
        make_product(sku="TEE-M", stock=5)
        fake_provider.stock = {"TEE-M": 0}

        _refresh("TEE-M")

        assert not current_domain.repository_for(ProductVariant).find_by_sku("TEE-M").is_available

    def test_failed_lookup_counts_as_zero(self, make_product, fake_provider):
        make_product(sku="TEE-M", stock=5)
        make_product(sku="TEE-L", stock=0)
        fake_provider.stock = {"TEE-L": 4}
        fake_provider.failing_skus = {"TEE-M"}

        result = _refresh("TEE-M", "TEE-L")

        assert result["stock"] == {"TEE-M": 0, "TEE-L": 4}
        assert current_domain.repository_for(ProductVariant).find_by_sku("TEE-M").stock_quantity == 0

    def test_unknown_sku_is_reported_but_not_stored(self, fake_provider):
        fake_provider.stock = {"GHOST": 3}
        assert _refresh("GHOST")["stock"] == {"GHOST": 3}
        assert current_domain.repository_for(ProductVariant).find_by_sku("GHOST") is None

    def test_duplicate_skus_are_looked_up_once(self, fake_provider):
        _refresh("A", "A", "B")
        lookups = [call["sku"] for call in fake_provider.calls if call["method"] == "get_stock_by_sku"]
        assert lookups == ["A", "B"]
