"""Shared BDD fixtures and step definitions for the storefront."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.ordering.fulfillment_events import ProcessFulfillmentEvent
from storefront.ordering.order import Order


@pytest.fixture()
def callback():
    """Container for the outcome or error of the last provider callback."""
    return {"outcome": None, "exc": None}


@pytest.fixture()
def report(callback):
    """Deliver a fulfillment callback and capture its outcome or rejection."""

    def _report(event_type, reference, **data):
        try:
            callback["outcome"] = current_domain.process(
                ProcessFulfillmentEvent(
                    event_type=event_type,
                    reference=reference,
                    event_data=json.dumps({"reference": reference, **data}),
                ),
                asynchronous=False,
            )
            callback["exc"] = None
        except ValidationError as exc:
            callback["outcome"] = None
            callback["exc"] = exc

    return _report


# ---------------------------------------------------------------------------
# Given / When steps
# ---------------------------------------------------------------------------
@given("a paid order", target_fixture="order")
def _(place_order):
    return place_order()


@given(parsers.cfparse('the provider reports "{event_type}"'))
@when(parsers.cfparse('the provider reports "{event_type}"'))
def _(order, report, event_type):
    report(event_type, str(order.id))


@given(parsers.cfparse('the order is shipped with carrier "{carrier}" tracking "{tracking}"'))
@when(parsers.cfparse('the order is shipped with carrier "{carrier}" tracking "{tracking}"'))
def _(order, report, carrier, tracking):
    report("shipment.sent", str(order.id), carrier=carrier, trackingNumber=tracking)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the callback outcome is "{outcome}"'))
def _(callback, outcome):
    assert callback["exc"] is None
    assert callback["outcome"] == outcome


@then("the callback is rejected")
def _(callback):
    assert isinstance(callback["exc"], ValidationError)


@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert current_domain.repository_for(Order).get(order.id).status == status


@then(parsers.cfparse('the tracking number is "{tracking}"'))
def _(order, tracking):
    assert current_domain.repository_for(Order).get(order.id).tracking_number == tracking
