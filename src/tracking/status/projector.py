"""Status projector — what the console shows for an order.

Pure read-time functions over an order's stored state. Nothing here writes
back: when payment has settled but the ledger still says ``pending_payment``,
the projection moves the order forward visually and leaves the ledger alone.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tracking.status.catalog import (
    OrderStatus,
    canonical_sequence,
    descriptor,
    is_settled,
    label_for,
    parse_status,
)

PAYMENT_CONFIRMED_MESSAGE = "Your payment has been confirmed."

_UNPAID_STATUSES = {"pending", OrderStatus.PENDING_PAYMENT.value}


class StepState(Enum):
    """Timeline step state, valued by its marker color."""

    COMPLETED = "#F7C948"
    ACTIVE = "#2D7FF9"
    PENDING = "#D1D5DB"


@dataclass(frozen=True)
class TimelineEntry:
    status: str
    message: str
    timestamp: datetime | None = None
    location: str | None = None
    updated_by: object = None
    virtual: bool = False
    speculative: bool = False


@dataclass(frozen=True)
class TimelineStep:
    status: OrderStatus
    label: str
    index: int
    entry: TimelineEntry | None = None
    completed: bool = False
    active: bool = False
    pending: bool = True

    @property
    def state(self) -> StepState:
        if self.completed:
            return StepState.COMPLETED
        if self.active:
            return StepState.ACTIVE
        return StepState.PENDING


def _raw_status(order) -> str:
    return str(order.current_status or OrderStatus.PENDING_PAYMENT.value).strip().lower()


def _entry_from(event, **overrides) -> TimelineEntry:
    values = {
        "status": str(event.status),
        "message": event.message or "",
        "timestamp": event.timestamp,
        "location": event.location or None,
        "updated_by": getattr(event, "updated_by", None),
        "speculative": getattr(event, "speculative", False),
    }
    values.update(overrides)
    return TimelineEntry(**values)


def payment_ahead_of_status(order) -> bool:
    """Payment has settled but no status change has been recorded yet."""
    return is_settled(order.payment_status) and _raw_status(order) in _UNPAID_STATUSES


def display_status(order) -> str:
    if payment_ahead_of_status(order):
        return OrderStatus.CONFIRMED.value
    return order.current_status or OrderStatus.PENDING_PAYMENT.value


def display_label(order) -> str:
    return label_for(display_status(order))


def suggested_status(order) -> str:
    """Default selection for the status form."""
    return display_status(order)


def can_update(order) -> bool:
    """Delivered orders hide the update control. Advisory only: the guard does not enforce it."""
    return parse_status(order.current_status) is not OrderStatus.DELIVERED


def active_step_index(order) -> int:
    sequence = canonical_sequence(order.order_type)
    if is_settled(order.payment_status) and _raw_status(order) == OrderStatus.PENDING_PAYMENT.value:
        return sequence.index(OrderStatus.PAYMENT_COMPLETED)

    status = parse_status(order.current_status)
    if status is None:
        return 0
    if status not in sequence:
        status = descriptor(status).step
    if status is None or status not in sequence:
        return 0
    return sequence.index(status)


def _in_append_order(history) -> list:
    """Ledger entries by ``sequence`` when every entry has one, otherwise as given."""
    entries = list(history or [])
    if entries and all(getattr(e, "sequence", None) is not None for e in entries):
        return sorted(entries, key=lambda e: e.sequence)
    return entries


def _first_entry_for(history, status: OrderStatus):
    return next((e for e in history if parse_status(e.status) is status), None)


def build_timeline(order) -> list[TimelineStep]:
    """Every canonical step for the order, with its first ledger entry attached."""
    history = _in_append_order(order.tracking_history)
    active = active_step_index(order)
    settled = is_settled(order.payment_status)

    steps = []
    for index, status in enumerate(canonical_sequence(order.order_type)):
        event = _first_entry_for(history, status)
        entry = _entry_from(event) if event is not None else None

        if entry is None and status is OrderStatus.PAYMENT_COMPLETED and settled:
            entry = TimelineEntry(
                status=status.value,
                message=PAYMENT_CONFIRMED_MESSAGE,
                timestamp=order.paid_at or order.created_at,
                virtual=True,
            )

        steps.append(
            TimelineStep(
                status=status,
                label=descriptor(status).step_label,
                index=index,
                entry=entry,
                completed=index < active,
                active=index == active,
                pending=index > active,
            )
        )
    return steps


def history_view(order, speculative=None) -> list[TimelineEntry]:
    """Ledger entries in append order, followed by an in-flight entry if one is given."""
    entries = [_entry_from(e) for e in _in_append_order(order.tracking_history)]
    if speculative is not None:
        entries.append(_entry_from(speculative, speculative=True))
    return entries
