"""Fulfillment provider port (abstract interface).

Defines the contract the print-on-demand adapters implement so that the
catalogue sync, stock refresh and order submission never talk to a concrete
API client directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ArticleVariant:
    """A sellable variant of a remote article. ``price`` is in currency units."""

    sku: str
    appearance_id: str | None = None
    size_id: str | None = None
    price: float = 0.0
    stock: int | None = None


@dataclass(frozen=True)
class Article:
    id: str
    name: str
    description: str | None = None
    variants: list[ArticleVariant] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArticlePage:
    items: list[Article]
    count: int
    limit: int
    offset: int


@dataclass(frozen=True)
class StockPage:
    """One page of the SKU to quantity map."""

    items: dict[str, int]
    count: int
    limit: int
    offset: int


@dataclass(frozen=True)
class FulfillmentOrderResult:
    order_id: str
    reference: str
    status: str | None = None


class FulfillmentProvider(ABC):
    """Abstract fulfillment provider interface."""

    @abstractmethod
    def list_articles(self, limit: int = 100, offset: int = 0) -> ArticlePage:
        """Return one page of the shop's articles."""
        ...

    @abstractmethod
    def get_stock(self, limit: int = 1000, offset: int = 0) -> StockPage:
        """Return one page of the SKU to quantity map."""
        ...

    @abstractmethod
    def get_stock_by_sku(self, sku: str) -> int:
        ...

    @abstractmethod
    def create_order(self, reference: str, recipient: dict, items: list[dict]) -> FulfillmentOrderResult:
        """Create a draft order. ``reference`` is the local order id."""
        ...

    @abstractmethod
    def confirm_order(self, order_id: str) -> None:
        """Confirm a draft order so that production starts."""
        ...

    def submit_order(self, reference: str, recipient: dict, items: list[dict]) -> str:
        """Create and confirm an order, returning the provider's order id."""
        result = self.create_order(reference, recipient, items)
        self.confirm_order(result.order_id)
        return result.order_id
