"""BDD tests for turning a completed payment session into an order."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.billing.webhook import ProcessPaymentEvent
from storefront.checkout.session import create_checkout_session
from storefront.ordering.order import Order

scenarios("features/payment_webhook.feature")


@pytest.fixture()
def event_result():
    return {"outcome": None}


def _complete(fake_gateway, checkout, event_id):
    session = {
        "id": checkout.session_id,
        "metadata": fake_gateway.sessions[checkout.session_id]["metadata"],
        "payment_intent": "pi_bdd",
        "amount_total": checkout.total_cents,
        "currency": "usd",
    }
    return current_domain.process(
        ProcessPaymentEvent(
            event_id=event_id,
            event_type="checkout.session.completed",
            event_data=json.dumps(session),
        ),
        asynchronous=False,
    )


def _member_orders():
    return current_domain.repository_for(Order).for_user("user-1")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a variant priced at {price:d} cents with {stock:d} in stock"),
    target_fixture="variant",
)
def _(make_product, price, stock):
    _, variant = make_product(base_price_cents=price, stock=stock)
    return variant


@given(parsers.cfparse("a checkout for {quantity:d} of that variant"), target_fixture="checkout")
def _(fake_gateway, variant, shipping_address, quantity):
    return create_checkout_session(
        fake_gateway,
        user_id="user-1",
        items=[{"variant_id": str(variant.id), "quantity": quantity}],
        shipping_address=shipping_address,
        origin="http://localhost:3000",
    )


@given(parsers.cfparse('the payment provider reported the session completed as "{event_id}"'))
def _(fake_gateway, checkout, event_id):
    _complete(fake_gateway, checkout, event_id)


@given("the fulfillment provider is down")
def _(fake_provider):
    fake_provider.configure(should_succeed=False, failure_reason="Provider down")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the payment provider reports the session completed as "{event_id}"'))
def _(fake_gateway, checkout, event_result, event_id):
    event_result["outcome"] = _complete(fake_gateway, checkout, event_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the event outcome is "{outcome}"'))
def _(event_result, outcome):
    assert event_result["outcome"] == outcome


@then(parsers.cfparse("the member has {count:d} order totalling {total:d} cents"))
def _(count, total):
    orders = _member_orders()
    assert len(orders) == count
    assert all(order.total_cents == total for order in orders)


@then("the order was sent to the fulfillment provider")
def _(fake_provider):
    order = _member_orders()[0]
    assert order.fulfillment_order_id in fake_provider.orders


@then("the order awaits fulfillment submission")
def _():
    order = _member_orders()[0]
    assert order.awaiting_submission
    assert "Provider down" in order.fulfillment_error
