import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Row",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "country": "us",
    "email": "ada@example.com",
}


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def fake_gateway():
    from storefront.gateway import reset_gateway, set_gateway
    from storefront.gateway.fake_adapter import FakeGateway

    gateway = FakeGateway()
    set_gateway(gateway)
    yield gateway
    reset_gateway()


@pytest.fixture()
def fake_provider():
    from storefront.fulfillment import reset_fulfillment_provider, set_fulfillment_provider
    from storefront.fulfillment.fake_adapter import FakeFulfillmentProvider

    provider = FakeFulfillmentProvider()
    set_fulfillment_provider(provider)
    yield provider
    reset_fulfillment_provider()


@pytest.fixture(autouse=True)
def _adapters(fake_gateway, fake_provider):
    """Every test runs against the in-memory payment and fulfillment adapters."""
    yield


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def make_product():
    """Persist a product with one variant and return ``(product, variant)``."""
    from storefront.catalogue.product import Product, ProductVariant

    counter = {"n": 0}

    def _make(name="Logo Tee", base_price_cents=1998, stock=10, sku=None, is_active=True, size="M", color="black"):
        counter["n"] += 1
        product = Product.create(
            external_id=f"art-{counter['n']}",
            name=name,
            description=f"{name} description",
            image_urls=[f"https://img.example.com/{counter['n']}.png"],
        )
        if not is_active:
            product.deactivate()
        current_domain.repository_for(Product).add(product)

        variant = ProductVariant.create(
            product_id=product.id,
            sku=sku or f"SKU-{counter['n']}",
            base_price_cents=base_price_cents,
            size=size,
            color=color,
            stock_quantity=stock,
        )
        current_domain.repository_for(ProductVariant).add(variant)
        return product, variant

    return _make


@pytest.fixture()
def make_profile():
    from storefront.membership.profile import Profile

    def _make(user_id="user-1", email="member@example.com", role="user", customer_id=None, subscription_id=None):
        profile = Profile.register(user_id=user_id, email=email, full_name="Member", role=role)
        if customer_id or subscription_id:
            profile.activate_subscription(customer_id=customer_id, subscription_id=subscription_id, plan="monthly")
        current_domain.repository_for(Profile).add(profile)
        return profile

    return _make


@pytest.fixture()
def place_order(shipping_address):
    """Persist an order for one line, optionally already paid."""
    from storefront.ordering.order import Order

    def _place(user_id="user-1", session_id="cs_test_1", paid=True, quantity=2, unit_price_cents=2597):
        order = Order.place(
            user_id=user_id,
            checkout_session_id=session_id,
            items_data=[
                {
                    "product_id": "prod-1",
                    "variant_id": "var-1",
                    "sku": "SKU-1",
                    "product_name": "Logo Tee",
                    "quantity": quantity,
                    "unit_price_cents": unit_price_cents,
                }
            ],
            shipping_address=shipping_address,
        )
        if paid:
            order.mark_paid("pi_test_1")
        current_domain.repository_for(Order).add(order)
        return current_domain.repository_for(Order).get(order.id)

    return _place
