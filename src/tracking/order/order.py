"""Order aggregate (CQRS) — owner of the tracking ledger.

The Order is mutated only by appending to its ``tracking_history``. Each
append is validated by the transition guard, stored with a server timestamp
and the next ``sequence`` number, and moves ``current_status`` to the
appended status in the same repository write.

Ledger rules:
    - entries are never edited or removed
    - ``current_status`` is the status of the highest ``sequence``, whatever
      the timestamps say
    - repeated statuses are recorded again, not deduplicated
    - delivered / cancelled / refunded are terminal by convention only
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    HasMany,
    Integer,
    String,
    ValueObject,
)

from tracking.domain import tracking
from tracking.order.events import (
    OrderPlaced,
    PaymentConfirmed,
    TrackingEventAppended,
    TrackingNumberAssigned,
)
from tracking.status import guard
from tracking.status.catalog import (
    OrderStatus,
    OrderType,
    PaymentStatus,
    UpdateChannel,
    dispatches,
    is_settled,
    parse_status,
)

ORDER_PLACED_MESSAGE = "Order placed"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@tracking.value_object(part_of="Order")
class Attribution:
    """Who recorded a tracking event. Informational; never used by the guard."""

    name = String(max_length=100)
    email = String(max_length=254)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@tracking.entity(part_of="Order")
class TrackingEvent:
    """One entry in the order's tracking ledger."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, max_length=50, choices=OrderStatus)
    message = String(required=True, max_length=500)
    location = String(max_length=200)
    timestamp = DateTime(required=True)
    updated_by = ValueObject(Attribution)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@tracking.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    tracking_number = String(max_length=100)
    order_type = String(
        choices=OrderType,
        default=OrderType.STANDARD.value,
    )
    payment_status = String(
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    current_status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING_PAYMENT.value,
    )
    tracking_history = HasMany(TrackingEvent)
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number: str,
        order_type: str = OrderType.STANDARD.value,
        payment_status: str = PaymentStatus.PENDING.value,
        tracking_number: str | None = None,
    ):
        """Place a new order with its ledger opened at ``pending_payment``."""
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            order_type=order_type,
            payment_status=payment_status,
            tracking_number=tracking_number or None,
            current_status=OrderStatus.PENDING_PAYMENT.value,
            paid_at=now if is_settled(payment_status) else None,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                order_type=order.order_type,
                payment_status=order.payment_status,
                tracking_number=order.tracking_number or "",
                placed_at=now,
            )
        )
        order._record(
            OrderStatus.PENDING_PAYMENT.value,
            ORDER_PLACED_MESSAGE,
            channel=UpdateChannel.SYSTEM,
            updated_by=Attribution(name="System", email=""),
            now=now,
        )
        return order

    # -------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------
    @property
    def ledger(self) -> list:
        """Tracking history in append order."""
        return sorted(self.tracking_history or [], key=lambda e: e.sequence)

    def append_tracking_event(
        self,
        status: str,
        message: str,
        location: str | None = None,
        updated_by: Attribution | None = None,
        channel: UpdateChannel = UpdateChannel.GENERAL,
    ) -> TrackingEvent:
        """Append a status change to the ledger and make it the current status."""
        guard.validate(self, status)
        if not (message or "").strip():
            raise ValidationError({"message": ["Message is required"]})

        event = self._record(status, message.strip(), location, updated_by, channel)

        if not self.tracking_number and dispatches(self.order_type, event.status):
            self._assign_tracking_number(event.timestamp)
        return event

    def _record(self, status, message, location=None, updated_by=None, channel=UpdateChannel.GENERAL, now=None):
        now = now or datetime.now(UTC)
        previous_status = self.current_status
        sequence = max((e.sequence for e in (self.tracking_history or [])), default=0) + 1
        status = parse_status(status).value

        event = TrackingEvent(
            sequence=sequence,
            status=status,
            message=message,
            location=(location or "").strip() or None,
            timestamp=now,
            updated_by=updated_by,
        )
        self.add_tracking_history(event)
        self.current_status = status
        self.updated_at = now
        self.raise_(
            TrackingEventAppended(
                order_id=str(self.id),
                sequence=sequence,
                status=status,
                previous_status=previous_status or "",
                message=message,
                location=event.location or "",
                updated_by_name=updated_by.name if updated_by else "",
                updated_by_email=updated_by.email if updated_by else "",
                channel=channel.value,
                appended_at=now,
            )
        )
        return event

    def _assign_tracking_number(self, now: datetime) -> None:
        self.tracking_number = f"TRK-{uuid4().hex[:10].upper()}"
        self.raise_(
            TrackingNumberAssigned(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def confirm_payment(self) -> bool:
        """Mark payment settled. Returns False if it already was.

        Does not append a ``payment_completed`` entry; the console's
        projection shows a virtual one instead.
        """
        if is_settled(self.payment_status):
            return False

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.paid_at = now
        self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_status=self.payment_status,
                paid_at=now,
            )
        )
        return True
