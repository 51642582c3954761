import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from storefront.api import (
    account_router,
    admin_router,
    billing_router,
    fulfillment_webhook_router,
    payment_webhook_router,
    register_error_handlers,
    shop_router,
)
from storefront.auth.session import SESSION_COOKIE, sign_session


@pytest.fixture()
def client():
    from storefront.domain import storefront

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    app.include_router(shop_router)
    app.include_router(admin_router)
    app.include_router(billing_router)
    app.include_router(account_router)
    app.include_router(payment_webhook_router)
    app.include_router(fulfillment_webhook_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def login(client, make_profile):
    """Sign the client in, creating the profile unless ``with_profile`` is False."""

    def _login(user_id="user-1", role="user", with_profile=True, **profile_kwargs):
        profile = None
        if with_profile:
            profile = make_profile(user_id=user_id, email=f"{user_id}@example.com", role=role, **profile_kwargs)
        client.cookies.set(SESSION_COOKIE, sign_session(user_id))
        return profile

    return _login
