"""SpreadConnect API client.

Talks JSON over HTTPS with a bearer API key. Transient failures (429 and 5xx)
are retried by the session's urllib3 ``Retry`` policy with exponential
backoff, honouring ``Retry-After``; every other non-2xx response, and a
request that still fails after the retries, surfaces as ``UpstreamError``.
"""

from urllib.parse import quote

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from storefront.errors import UpstreamError
from storefront.fulfillment.port import (
    Article,
    ArticlePage,
    ArticleVariant,
    FulfillmentOrderResult,
    FulfillmentProvider,
    StockPage,
)

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.spreadconnect.app"
DEFAULT_TIMEOUT = 15  # seconds
MAX_RETRIES = 3
PROVIDER = "spreadconnect"


def _build_session(api_key: str, max_retries: int = MAX_RETRIES) -> requests.Session:
    retry = Retry(
        total=max_retries,
        backoff_factor=1,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "POST"}),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    session = requests.Session()
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    session.headers.update(
        {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    )
    return session


def _parse_article(raw: dict) -> Article:
    return Article(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        description=raw.get("description"),
        variants=[
            ArticleVariant(
                sku=variant["sku"],
                appearance_id=variant.get("appearanceId"),
                size_id=variant.get("sizeId"),
                price=variant.get("price") or 0,
                stock=variant.get("stock"),
            )
            for variant in raw.get("variants") or []
        ],
        images=list(raw.get("images") or []),
    )


def recipient_from_address(address: dict) -> dict:
    """Shape a stored shipping address the way the order API expects it."""
    recipient = {
        "firstName": address["first_name"],
        "lastName": address["last_name"],
        "street": address["street"],
        "city": address["city"],
        "postalCode": address["postal_code"],
        "countryCode": address["country"].upper(),
        "state": address.get("state"),
        "email": address.get("email"),
        "phone": address.get("phone"),
    }
    return {key: value for key, value in recipient.items() if value is not None}


class SpreadConnectClient(FulfillmentProvider):
    """Production SpreadConnect adapter."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or _build_session(api_key)

    def _request(self, method: str, endpoint: str, **kwargs):
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("spreadconnect_request_failed", method=method, endpoint=endpoint, error=str(exc))
            raise UpstreamError(PROVIDER, f"{method} {endpoint} failed: {exc}") from exc

        if not response.ok:
            logger.error(
                "spreadconnect_error_response",
                method=method,
                endpoint=endpoint,
                status=response.status_code,
                body=response.text[:500],
            )
            raise UpstreamError(
                PROVIDER,
                f"API error ({response.status_code}): {response.text[:200]}",
                upstream_status=response.status_code,
            )

        if not response.content:
            return None
        return response.json()

    def list_articles(self, limit: int = 100, offset: int = 0) -> ArticlePage:
        data = self._request("GET", "/articles", params={"limit": limit, "offset": offset})
        return ArticlePage(
            items=[_parse_article(raw) for raw in data.get("items", [])],
            count=data.get("count", 0),
            limit=data.get("limit", limit),
            offset=data.get("offset", offset),
        )

    def get_stock(self, limit: int = 1000, offset: int = 0) -> StockPage:
        data = self._request("GET", "/stock", params={"limit": limit, "offset": offset})
        items = {sku: int(quantity or 0) for sku, quantity in (data.get("items") or {}).items()}
        return StockPage(
            items=items,
            count=data.get("count", len(items)),
            limit=data.get("limit", limit),
            offset=data.get("offset", offset),
        )

    def get_stock_by_sku(self, sku: str) -> int:
        return int(self._request("GET", f"/stock/{quote(sku, safe='')}") or 0)

    def create_order(self, reference: str, recipient: dict, items: list[dict]) -> FulfillmentOrderResult:
        data = self._request(
            "POST",
            "/orders",
            json={"reference": reference, "recipient": recipient, "items": items},
        )
        logger.info("spreadconnect_order_created", reference=reference, spreadconnect_order_id=data["orderId"])
        return FulfillmentOrderResult(
            order_id=str(data["orderId"]),
            reference=data.get("reference", reference),
            status=data.get("status"),
        )

    def confirm_order(self, order_id: str) -> None:
        self._request("POST", f"/orders/{order_id}/confirm")
        logger.info("spreadconnect_order_confirmed", spreadconnect_order_id=order_id)
