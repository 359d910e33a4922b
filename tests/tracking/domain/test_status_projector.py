"""Tests for the status projector — display status, active step and timeline."""

from datetime import UTC, datetime, timedelta

import pytest
from tracking.console.models import OrderSnapshot, TrackingEntry
from tracking.status.catalog import OrderStatus, canonical_sequence
from tracking.status.projector import (
    PAYMENT_CONFIRMED_MESSAGE,
    StepState,
    active_step_index,
    build_timeline,
    can_update,
    display_label,
    display_status,
    history_view,
    payment_ahead_of_status,
    suggested_status,
)

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _entry(status, minutes=0, message=None):
    return TrackingEntry(status=status, message=message or status, timestamp=T0 + timedelta(minutes=minutes))


def _order(order_type="standard", payment_status="paid", current_status="pending_payment", history=None, **extra):
    return OrderSnapshot(
        id="ord-1",
        order_number="ORD-0001",
        order_type=order_type,
        payment_status=payment_status,
        current_status=current_status,
        tracking_history=history if history is not None else [_entry("pending_payment")],
        created_at=T0,
        **extra,
    )


class TestDisplayStatus:
    @pytest.mark.parametrize("payment_status", ["paid", "completed"])
    @pytest.mark.parametrize("current_status", ["pending", "pending_payment"])
    def test_settled_payment_over_pending_status_displays_confirmed(self, payment_status, current_status):
        order = _order(payment_status=payment_status, current_status=current_status)
        assert display_status(order) == "confirmed"
        assert display_label(order) == "Confirmed"
        assert payment_ahead_of_status(order)

    def test_unpaid_order_displays_its_stored_status(self):
        order = _order(payment_status="pending")
        assert display_status(order) == "pending_payment"
        assert not payment_ahead_of_status(order)

    def test_recorded_status_is_displayed_as_is(self):
        assert display_status(_order(current_status="preparing")) == "preparing"

    def test_projection_does_not_touch_the_order(self):
        order = _order()
        display_status(order)
        build_timeline(order)
        assert order.current_status == "pending_payment"
        assert len(order.tracking_history) == 1

    def test_suggested_status_matches_display(self):
        assert suggested_status(_order()) == "confirmed"


class TestActiveStepIndex:
    def test_paid_but_pending_points_at_payment_completed(self):
        order = _order()
        assert active_step_index(order) == canonical_sequence("standard").index(OrderStatus.PAYMENT_COMPLETED)

    @pytest.mark.parametrize("order_type", ["standard", "preorder_international"])
    def test_delivered_is_the_last_step(self, order_type):
        order = _order(order_type=order_type, current_status="delivered")
        assert active_step_index(order) == len(canonical_sequence(order_type)) - 1

    def test_confirmed_occupies_the_processing_step(self):
        order = _order(current_status="confirmed")
        assert active_step_index(order) == canonical_sequence("standard").index(OrderStatus.PROCESSING)

    @pytest.mark.parametrize("current_status", ["cancelled", "refunded", "in_transit"])
    def test_statuses_outside_the_sequence_point_at_the_first_step(self, current_status):
        assert active_step_index(_order(current_status=current_status)) == 0

    def test_international_status_on_international_order(self):
        order = _order(order_type="preorder_international", current_status="customs_clearance")
        assert active_step_index(order) == canonical_sequence("preorder_international").index(
            OrderStatus.CUSTOMS_CLEARANCE
        )


class TestTimeline:
    def test_one_step_per_canonical_status(self):
        steps = build_timeline(_order(order_type="preorder_international"))
        assert [s.status for s in steps] == list(canonical_sequence("preorder_international"))

    def test_paid_order_gets_a_virtual_payment_entry(self):
        paid_at = T0 + timedelta(minutes=5)
        steps = build_timeline(_order(paid_at=paid_at))
        payment = steps[1]
        assert payment.status is OrderStatus.PAYMENT_COMPLETED
        assert payment.entry.virtual
        assert payment.entry.message == PAYMENT_CONFIRMED_MESSAGE
        assert payment.entry.timestamp == paid_at

    def test_virtual_payment_entry_falls_back_to_created_at(self):
        steps = build_timeline(_order())
        assert steps[1].entry.timestamp == T0

    def test_unpaid_order_has_no_payment_entry(self):
        steps = build_timeline(_order(payment_status="pending"))
        assert steps[1].entry is None

    def test_recorded_payment_entry_is_not_virtual(self):
        history = [_entry("pending_payment"), _entry("payment_completed", 3, "Paid by card")]
        steps = build_timeline(_order(current_status="payment_completed", history=history))
        assert not steps[1].entry.virtual
        assert steps[1].entry.message == "Paid by card"

    def test_first_matching_entry_is_attached(self):
        history = [
            _entry("pending_payment"),
            _entry("processing", 1, "first"),
            _entry("preparing", 2),
            _entry("processing", 3, "second"),
        ]
        steps = build_timeline(_order(current_status="processing", history=history))
        assert steps[2].entry.message == "first"

    def test_step_states(self):
        steps = build_timeline(_order(current_status="preparing"))
        active = [s for s in steps if s.active]
        assert len(active) == 1
        assert active[0].status is OrderStatus.PREPARING
        assert active[0].state is StepState.ACTIVE
        assert all(s.state is StepState.COMPLETED for s in steps[: active[0].index])
        assert all(s.state is StepState.PENDING for s in steps[active[0].index + 1 :])

    def test_step_labels(self):
        labels = [s.label for s in build_timeline(_order())]
        assert labels[0] == "Order Placed"
        assert "Rider Assigned" in labels


class TestHistoryView:
    def test_entries_in_append_order(self):
        history = [_entry("pending_payment", 10), _entry("processing", 0)]
        entries = history_view(_order(history=history))
        assert [e.status for e in entries] == ["pending_payment", "processing"]

    def test_speculative_entry_is_last_and_flagged(self):
        view = history_view(_order(), speculative=_entry("processing", 1))
        assert view[-1].status == "processing"
        assert view[-1].speculative
        assert not view[0].speculative


class TestCanUpdate:
    def test_delivered_orders_hide_updates(self):
        assert not can_update(_order(current_status="delivered"))

    @pytest.mark.parametrize("current_status", ["pending_payment", "cancelled", "refunded", "out_for_delivery"])
    def test_other_orders_may_update(self, current_status):
        assert can_update(_order(current_status=current_status))
