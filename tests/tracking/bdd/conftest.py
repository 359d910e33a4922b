"""Shared BDD fixtures and step definitions for the Tracking domain."""

import pytest
from pytest_bdd import given, parsers, then
from tracking.order.order import Order
from tracking.status.catalog import canonical_sequence
from tracking.status.projector import active_step_index, display_status


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a paid "{order_type}" order'), target_fixture="order")
def paid_order(order_type):
    order = Order.place(order_number="ORD-BDD-1", order_type=order_type, payment_status="paid")
    order._events.clear()
    return order


@given(parsers.cfparse('an unpaid "{order_type}" order'), target_fixture="order")
def unpaid_order(order_type):
    order = Order.place(order_number="ORD-BDD-2", order_type=order_type, payment_status="pending")
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the current status is "{status}"'))
def current_status_is(order, status):
    assert order.current_status == status


@then(parsers.cfparse("the ledger has {count:d} entries"))
def ledger_has(order, count):
    assert len(order.ledger) == count


@then(parsers.cfparse('the displayed status is "{status}"'))
def displayed_status_is(order, status):
    assert display_status(order) == status


@then(parsers.cfparse('the active step is "{status}"'))
def active_step_is(order, status):
    sequence = [s.value for s in canonical_sequence(order.order_type)]
    assert active_step_index(order) == sequence.index(status)


@then("the active step is the last step")
def active_step_is_last(order):
    assert active_step_index(order) == len(canonical_sequence(order.order_type)) - 1
