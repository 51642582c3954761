"""FastAPI routes for the storefront — shop, admin, billing and account."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_principal, payment_gateway, request_origin, require_admin, require_user
from storefront.api.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    PortalRequest,
    PortalResponse,
    ProductListResponse,
    ProductResponse,
    ProfileResponse,
    SessionResponse,
    SettingsResponse,
    StockRequest,
    StockResponse,
    SubmitOrderResponse,
    SubscriptionCheckoutRequest,
    SyncResponse,
    UpdateSettingsRequest,
)
from storefront.auth.policy import Principal
from storefront.catalogue.listing import get_product, list_products
from storefront.catalogue.stock import RefreshStock
from storefront.catalogue.sync import SyncCatalogue
from storefront.checkout.session import create_checkout_session
from storefront.errors import NotFoundError
from storefront.fulfillment import has_api_key
from storefront.gateway.port import PaymentGateway
from storefront.membership.billing import open_billing_portal, start_subscription_checkout
from storefront.ordering.order import Order
from storefront.ordering.submission import SubmitOrderToFulfillment
from storefront.settings.settings import UpdateMarkup, current_settings


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        status=order.status,
        total_cents=order.total_cents,
        currency=order.currency,
        items=[
            OrderItemResponse(
                id=str(item.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id),
                sku=item.sku,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
            )
            for item in order.items
        ],
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        carrier=order.carrier,
        fulfillment_order_id=order.fulfillment_order_id,
        created_at=order.created_at.isoformat() if order.created_at else None,
    )


def _settings_response() -> SettingsResponse:
    settings = current_settings()
    return SettingsResponse(
        markup_percentage=settings.markup_percentage,
        updated_by=settings.updated_by,
        updated_at=settings.updated_at.isoformat() if settings.updated_at else None,
        has_api_key=has_api_key(),
    )


# ---------------------------------------------------------------------------
# Shop Router
# ---------------------------------------------------------------------------
shop_router = APIRouter(prefix="/shop", tags=["shop"])


@shop_router.get("/products", response_model=ProductListResponse)
async def products() -> ProductListResponse:
    """List active products with retail prices."""
    return ProductListResponse(products=list_products())


@shop_router.get("/products/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str) -> ProductResponse:
    return ProductResponse(**get_product(product_id))


@shop_router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest,
    principal: Principal = Depends(require_user),
    gateway: PaymentGateway = Depends(payment_gateway),
    origin: str = Depends(request_origin),
) -> CheckoutResponse:
    """Price the cart server-side and open a payment session."""
    result = create_checkout_session(
        gateway,
        user_id=principal.user_id,
        items=[item.model_dump() for item in body.items],
        shipping_address=body.shipping_address.model_dump() if body.shipping_address else None,
        origin=origin,
        user_email=principal.email,
    )
    return CheckoutResponse(session_id=result.session_id, url=result.url, total_cents=result.total_cents)


@shop_router.post("/stock", response_model=StockResponse)
async def refresh_stock(body: StockRequest) -> StockResponse:
    """Check live stock for SKUs and update the local cache."""
    result = current_domain.process(RefreshStock(skus=body.skus), asynchronous=False)
    return StockResponse(**result)


@shop_router.get("/orders", response_model=OrderListResponse)
async def my_orders(principal: Principal = Depends(require_user)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_user(principal.user_id)
    return OrderListResponse(orders=[_order_response(order) for order in orders])


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/shop", tags=["admin"])


@admin_router.get("/settings", response_model=SettingsResponse)
async def get_settings(principal: Principal = Depends(require_admin)) -> SettingsResponse:  # noqa: ARG001
    return _settings_response()


@admin_router.put("/settings", response_model=SettingsResponse)
async def update_settings(body: UpdateSettingsRequest, principal: Principal = Depends(require_admin)) -> SettingsResponse:
    current_domain.process(
        UpdateMarkup(markup_percentage=body.markup_percentage, updated_by=principal.user_id),
        asynchronous=False,
    )
    return _settings_response()


@admin_router.post("/sync", response_model=SyncResponse)
async def sync_catalogue(principal: Principal = Depends(require_admin)) -> SyncResponse:  # noqa: ARG001
    """Refresh the whole catalogue mirror from the fulfillment provider."""
    summary = current_domain.process(SyncCatalogue(), asynchronous=False)
    return SyncResponse(**summary)


@admin_router.post("/orders/{order_id}/submit", response_model=SubmitOrderResponse)
async def submit_order(order_id: str, principal: Principal = Depends(require_admin)) -> SubmitOrderResponse:  # noqa: ARG001
    """Retry fulfillment submission for a paid order."""
    current_domain.process(SubmitOrderToFulfillment(order_id=order_id), asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return SubmitOrderResponse(
        order_id=str(order.id),
        fulfillment_order_id=order.fulfillment_order_id,
        fulfillment_error=order.fulfillment_error,
    )


# ---------------------------------------------------------------------------
# Billing Router
# ---------------------------------------------------------------------------
billing_router = APIRouter(prefix="/billing", tags=["billing"])


@billing_router.post("/checkout-session", response_model=SessionResponse)
async def subscription_checkout(
    body: SubscriptionCheckoutRequest,
    principal: Principal | None = Depends(current_principal),
    gateway: PaymentGateway = Depends(payment_gateway),
    origin: str = Depends(request_origin),
) -> SessionResponse:
    """Open a membership subscription session. Guests are allowed."""
    session = start_subscription_checkout(
        gateway,
        plan=body.plan,
        origin=origin,
        profile=principal.profile if principal else None,
        success_url=body.success_url,
        cancel_url=body.cancel_url,
    )
    return SessionResponse(session_id=session.id, url=session.url)


@billing_router.post("/portal", response_model=PortalResponse)
async def billing_portal(
    body: PortalRequest | None = None,
    principal: Principal = Depends(require_user),
    gateway: PaymentGateway = Depends(payment_gateway),
    origin: str = Depends(request_origin),
) -> PortalResponse:
    if principal.profile is None:
        raise NotFoundError("Profile", principal.user_id)
    portal = open_billing_portal(gateway, principal.profile, origin, return_url=body.return_url if body else None)
    return PortalResponse(url=portal.url)


# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/account", tags=["account"])


@account_router.get("/profile", response_model=ProfileResponse)
async def my_profile(principal: Principal = Depends(require_user)) -> ProfileResponse:
    profile = principal.profile
    if profile is None:
        raise NotFoundError("Profile", principal.user_id)
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        role=profile.role,
        subscription_status=profile.subscription_status,
        subscription_plan=profile.subscription_plan,
    )
