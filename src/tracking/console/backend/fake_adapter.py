"""Fake order backend — in-memory order service for testing and development.

Mirrors the server's ledger rules (guard, required message on the general
route, default message on the admin route) so the console can be exercised
without a running API. Configurable failure behavior for testing rollback.
"""

from datetime import UTC, datetime
from uuid import uuid4

from tracking.console.backend.port import OrderBackend
from tracking.console.errors import NetworkError, NotFound, RequestTimeout, ServerValidationError
from tracking.console.models import Attribution, OrderPage, OrderSnapshot, TrackingEntry
from tracking.status import guard
from tracking.status.catalog import DEFAULT_UPDATE_MESSAGE, OrderStatus, PaymentStatus, is_settled

_FAILURES = {
    "network": NetworkError,
    "timeout": RequestTimeout,
    "validation": ServerValidationError,
    "not_found": NotFound,
}


class FakeOrderBackend(OrderBackend):
    """Fake backend that always succeeds by default."""

    def __init__(self, actor: Attribution | None = None):
        self.orders: dict[str, OrderSnapshot] = {}
        self.calls: list[tuple] = []
        self.actor = actor or Attribution(name="Admin", email="")
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"
        self.failure_kind = "network"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Order service unavailable",
        failure_kind: str = "network",
    ):
        """Configure the fake backend behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failure_kind = failure_kind

    def seed(
        self,
        order_number: str = "ORD-0001",
        order_type: str = "standard",
        payment_status: str = PaymentStatus.PENDING.value,
        tracking_number: str | None = None,
        order_id: str | None = None,
        history: list[TrackingEntry] | None = None,
        current_status: str | None = None,
    ) -> OrderSnapshot:
        """Store an order as the server would after placement."""
        now = datetime.now(UTC)
        if history is None:
            history = [
                TrackingEntry(
                    status=OrderStatus.PENDING_PAYMENT.value,
                    message="Order placed",
                    timestamp=now,
                    sequence=1,
                    updated_by=Attribution(name="System", email=""),
                )
            ]
        order = OrderSnapshot(
            id=order_id or str(uuid4()),
            order_number=order_number,
            order_type=order_type,
            payment_status=payment_status,
            tracking_number=tracking_number,
            current_status=current_status or (history[-1].status if history else OrderStatus.PENDING_PAYMENT.value),
            tracking_history=history,
            paid_at=now if is_settled(payment_status) else None,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    def _check(self):
        if not self.should_succeed:
            raise _FAILURES[self.failure_kind](self.failure_reason)

    def _get(self, order_id: str) -> OrderSnapshot:
        try:
            return self.orders[order_id]
        except KeyError:
            raise NotFound(f"Order {order_id} not found", status_code=404) from None

    def _append(self, order_id, status, message, location) -> OrderSnapshot:
        order = self._get(order_id)
        try:
            guard.validate(order, status)
        except guard.GuardError as exc:
            raise ServerValidationError(exc.message, status_code=400) from exc

        entry = TrackingEntry(
            status=status,
            message=message,
            location=location or None,
            timestamp=datetime.now(UTC),
            updated_by=self.actor,
            sequence=len(order.tracking_history) + 1,
        )
        order = order.with_entry(entry).model_copy(update={"updated_at": entry.timestamp})
        self.orders[order_id] = order
        return order

    async def list_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        self.calls.append(("list_orders", page, limit))
        self._check()
        seeded = enumerate(self.orders.values())
        newest_first = [o for _, o in sorted(seeded, key=lambda p: (p[1].created_at, p[0]), reverse=True)]
        start = (page - 1) * limit
        return OrderPage(orders=newest_first[start : start + limit], total=len(newest_first), page=page, limit=limit)

    async def get_order(self, order_id: str) -> OrderSnapshot:
        self.calls.append(("get_order", order_id))
        self._check()
        return self._get(order_id)

    async def get_order_by_tracking_number(self, tracking_number: str) -> OrderSnapshot:
        self.calls.append(("get_order_by_tracking_number", tracking_number))
        self._check()
        for order in self.orders.values():
            if order.tracking_number == tracking_number:
                return order
        raise NotFound(f"No order with tracking number {tracking_number}", status_code=404)

    async def add_tracking_update(self, order_id, status, message, location=None) -> OrderSnapshot:
        self.calls.append(("add_tracking_update", order_id, status, message, location))
        self._check()
        if not (message or "").strip():
            raise ServerValidationError("Message is required", status_code=400)
        return self._append(order_id, status, message.strip(), location)

    async def update_order_status(self, order_id, status, message=None, location=None) -> OrderSnapshot:
        self.calls.append(("update_order_status", order_id, status, message, location))
        self._check()
        return self._append(order_id, status, (message or "").strip() or DEFAULT_UPDATE_MESSAGE, location)

    async def confirm_payment(self, order_id: str) -> OrderSnapshot:
        self.calls.append(("confirm_payment", order_id))
        self._check()
        order = self._get(order_id)
        if not is_settled(order.payment_status):
            now = datetime.now(UTC)
            order = order.model_copy(
                update={"payment_status": PaymentStatus.PAID.value, "paid_at": now, "updated_at": now}
            )
            self.orders[order_id] = order
        return order
