"""Tests for the transition guard — payment gating and order-type gating."""

import pytest
from protean.exceptions import ValidationError
from tracking.console.models import OrderSnapshot
from tracking.status import guard
from tracking.status.catalog import OrderStatus, is_international_only


def _order(order_type="standard", payment_status="pending", current_status="pending_payment"):
    return OrderSnapshot(
        id="ord-1",
        order_number="ORD-0001",
        order_type=order_type,
        payment_status=payment_status,
        current_status=current_status,
    )


class TestPaymentGuard:
    @pytest.mark.parametrize("status", [s for s in OrderStatus if s is not OrderStatus.CANCELLED])
    def test_unpaid_order_rejects_everything_but_cancelled(self, status):
        with pytest.raises(guard.GuardError):
            guard.validate(_order(order_type="preorder_international"), status.value)

    def test_unpaid_order_may_be_cancelled(self):
        assert guard.validate(_order(), "cancelled") is None

    def test_unpaid_order_cannot_move_to_processing(self):
        with pytest.raises(guard.PaymentPending) as exc:
            guard.validate(_order(), "processing")
        assert exc.value.message == (
            "Cannot update status while payment is pending. You may only cancel unpaid orders."
        )

    @pytest.mark.parametrize("payment_status", ["paid", "completed", "Paid"])
    def test_settled_order_accepts_common_statuses(self, payment_status):
        assert guard.is_admissible(_order(payment_status=payment_status), "processing")


class TestOrderTypeGuard:
    @pytest.mark.parametrize("payment_status", ["pending", "paid"])
    def test_customs_clearance_never_applies_to_standard(self, payment_status):
        with pytest.raises(guard.NotApplicableToOrderType):
            guard.validate(_order(payment_status=payment_status), "customs_clearance")

    @pytest.mark.parametrize("status", [s for s in OrderStatus if is_international_only(s)])
    def test_international_statuses_apply_to_paid_preorders(self, status):
        order = _order(order_type="preorder_international", payment_status="paid")
        assert guard.is_admissible(order, status)


class TestCatalogGuard:
    def test_blank_status_asks_for_a_selection(self):
        with pytest.raises(guard.NotInCatalog) as exc:
            guard.validate(_order(payment_status="paid"), "")
        assert exc.value.message == "Please select a status"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(guard.NotInCatalog) as exc:
            guard.validate(_order(payment_status="paid"), "in_transit")
        assert exc.value.requested_status == "in_transit"


class TestGuardSemantics:
    def test_backward_moves_are_allowed(self):
        order = _order(payment_status="paid", current_status="out_for_delivery")
        assert guard.is_admissible(order, "processing")

    def test_moves_out_of_delivered_are_allowed(self):
        order = _order(payment_status="paid", current_status="delivered")
        assert guard.is_admissible(order, "refunded")

    def test_repeating_the_current_status_is_allowed(self):
        order = _order(payment_status="paid", current_status="preparing")
        assert guard.is_admissible(order, "preparing")

    def test_guard_errors_are_validation_errors_keyed_on_status(self):
        with pytest.raises(ValidationError) as exc:
            guard.validate(_order(), "delivered")
        assert "status" in exc.value.messages
