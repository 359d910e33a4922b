"""BDD tests for the order tracking ledger."""

from pytest_bdd import parsers, scenarios, then, when
from tracking.status.guard import GuardError, NotApplicableToOrderType

scenarios("features/tracking_ledger.feature")


@when(
    parsers.cfparse('the status is changed to "{status}" with message "{message}"'),
    target_fixture="order",
)
def change_status(order, status, message):
    order.append_tracking_event(status, message)
    return order


@when(
    parsers.cfparse('the status change to "{status}" is attempted'),
    target_fixture="order",
)
def attempt_status_change(order, status, error):
    try:
        order.append_tracking_event(status, f"Attempted {status}")
    except GuardError as exc:
        error["exc"] = exc
    return order


@then(parsers.cfparse('the change is rejected with "{message}"'))
def change_rejected_with(error, message):
    assert error["exc"] is not None
    assert error["exc"].message == message


@then("the change is rejected as not applicable to the order type")
def change_not_applicable(error):
    assert isinstance(error["exc"], NotApplicableToOrderType)


@then("the order has a tracking number")
def has_tracking_number(order):
    assert order.tracking_number.startswith("TRK-")
