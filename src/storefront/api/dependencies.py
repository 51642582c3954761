"""FastAPI dependencies: session principal, authorization and adapters."""

from fastapi import Cookie, Depends, Request
from protean.utils.globals import current_domain

from storefront.auth.policy import Principal, Requirement, authorize
from storefront.auth.session import SESSION_COOKIE, verify_session
from storefront.gateway import get_gateway
from storefront.gateway.port import PaymentGateway
from storefront.membership.profile import Profile
from storefront.utils.urls import app_origin


async def current_principal(session: str | None = Cookie(default=None, alias=SESSION_COOKIE)) -> Principal | None:
    """Resolve the signed session cookie, if any, to a Principal."""
    user_id = verify_session(session)
    if user_id is None:
        return None
    return Principal(user_id=user_id, profile=current_domain.repository_for(Profile).find_by_id(user_id))


async def require_user(principal: Principal | None = Depends(current_principal)) -> Principal:
    return authorize(principal, Requirement.AUTHENTICATED)


async def require_admin(principal: Principal | None = Depends(current_principal)) -> Principal:
    return authorize(principal, Requirement.ADMIN)


async def payment_gateway() -> PaymentGateway:
    return get_gateway()


async def request_origin(request: Request) -> str:
    return app_origin(request.headers.get("origin"))
