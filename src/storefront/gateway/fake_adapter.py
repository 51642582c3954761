"""Configurable fake payment gateway for development and testing.

This adapter simulates the hosted checkout of a real payment gateway without
any external calls. Every session it opens is kept in ``sessions`` so tests
can replay the matching webhook, and it can be configured to fail so the
upstream error path is reachable.
"""

from uuid import uuid4

from storefront.errors import UpstreamError
from storefront.gateway.port import CheckoutSession, LineItem, PaymentGateway, PortalSession

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.sessions: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _open_session(self, mode: str, params: dict) -> CheckoutSession:
        self.calls.append({"method": f"create_{mode}_session", **params})
        if not self.should_succeed:
            raise UpstreamError("stripe", self.failure_reason, upstream_status=502)

        session_id = f"cs_test_{uuid4().hex[:16]}"
        self.sessions[session_id] = {"mode": mode, **params}
        return CheckoutSession(id=session_id, url=f"https://checkout.fake/pay/{session_id}")

    def create_payment_session(
        self,
        line_items: list[LineItem],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        return self._open_session(
            "payment",
            {
                "line_items": line_items,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
                "customer_id": customer_id,
                "customer_email": customer_email,
            },
        )

    def create_subscription_session(
        self,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        return self._open_session(
            "subscription",
            {
                "price_id": price_id,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
                "customer_id": customer_id,
                "customer_email": customer_email,
            },
        )

    def create_portal_session(self, customer_id: str, return_url: str) -> PortalSession:
        self.calls.append({"method": "create_portal_session", "customer_id": customer_id, "return_url": return_url})
        if not self.should_succeed:
            raise UpstreamError("stripe", self.failure_reason, upstream_status=502)
        return PortalSession(url=f"https://billing.fake/portal/{customer_id}")

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:  # noqa: ARG002
        return signature == TEST_SIGNATURE
