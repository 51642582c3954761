"""In-memory fulfillment provider for development and testing.

Holds a configurable article list and stock map, records every call, and can
be told to fail so that error paths are reachable without a network.
"""

from uuid import uuid4

from storefront.errors import UpstreamError
from storefront.fulfillment.port import Article, ArticlePage, FulfillmentOrderResult, FulfillmentProvider, StockPage


class FakeFulfillmentProvider(FulfillmentProvider):
    """Configurable fake fulfillment provider."""

    def __init__(self, articles: list[Article] | None = None, stock: dict[str, int] | None = None) -> None:
        self.articles: list[Article] = list(articles or [])
        self.stock: dict[str, int] = dict(stock or {})
        self.should_succeed: bool = True
        self.failure_reason: str = "Fulfillment provider unavailable"
        self.failing_skus: set[str] = set()
        self.orders: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Fulfillment provider unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _check(self) -> None:
        if not self.should_succeed:
            raise UpstreamError("spreadconnect", self.failure_reason, upstream_status=503)

    def list_articles(self, limit: int = 100, offset: int = 0) -> ArticlePage:
        self.calls.append({"method": "list_articles", "limit": limit, "offset": offset})
        self._check()
        return ArticlePage(
            items=self.articles[offset : offset + limit],
            count=len(self.articles),
            limit=limit,
            offset=offset,
        )

    def get_stock(self, limit: int = 1000, offset: int = 0) -> StockPage:
        self.calls.append({"method": "get_stock", "limit": limit, "offset": offset})
        self._check()
        return StockPage(
            items=dict(list(self.stock.items())[offset : offset + limit]),
            count=len(self.stock),
            limit=limit,
            offset=offset,
        )

    def get_stock_by_sku(self, sku: str) -> int:
        self.calls.append({"method": "get_stock_by_sku", "sku": sku})
        self._check()
        if sku in self.failing_skus:
            raise UpstreamError("spreadconnect", f"Stock lookup failed for {sku}", upstream_status=500)
        return self.stock.get(sku, 0)

    def create_order(self, reference: str, recipient: dict, items: list[dict]) -> FulfillmentOrderResult:
        self.calls.append({"method": "create_order", "reference": reference, "recipient": recipient, "items": items})
        self._check()
        order_id = f"fake_sc_{uuid4().hex[:12]}"
        self.orders[order_id] = {"reference": reference, "recipient": recipient, "items": items, "status": "new"}
        return FulfillmentOrderResult(order_id=order_id, reference=reference, status="new")

    def confirm_order(self, order_id: str) -> None:
        self.calls.append({"method": "confirm_order", "order_id": order_id})
        self._check()
        self.orders[order_id]["status"] = "confirmed"
