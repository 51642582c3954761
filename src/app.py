"""Storefront FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Every request runs inside the storefront domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront

storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Merchandise store, orders and membership billing",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.environ.get("APP_ORIGIN", "http://localhost:3000")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    account_router,
    admin_router,
    billing_router,
    fulfillment_webhook_router,
    payment_webhook_router,
    register_error_handlers,
    shop_router,
)

app.include_router(shop_router)
app.include_router(admin_router)
app.include_router(billing_router)
app.include_router(account_router)
app.include_router(payment_webhook_router)
app.include_router(fulfillment_webhook_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
        }
    )
