"""Storefront Observatory — real-time message flow observability.

Uses Protean's built-in Observatory server to provide a live dashboard,
Prometheus metrics, and REST API for monitoring the event pipeline that
carries order, catalogue and membership events.

Usage:
    uvicorn src.observatory:app --host 0.0.0.0 --port 9000
"""

from protean.server.observatory import create_observatory_app

from storefront.domain import storefront

storefront.init()

app = create_observatory_app(
    domains=[storefront],
    title="Storefront Observatory",
)
