"""BDD tests for order fulfillment callbacks."""

from pytest_bdd import parsers, scenarios, when

scenarios("features/order_fulfillment.feature")


@when(parsers.cfparse('a "{event_type}" callback arrives for order "{reference}"'))
def _(report, event_type, reference):
    report(event_type, reference)
