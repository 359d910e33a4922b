"""Status catalog — the fixed vocabulary of order tracking statuses.

Every status an order can carry is an ``OrderStatus`` member with exactly one
``StatusDescriptor``. Labels, colors and icons come from the descriptor, so a
new status is added in one place and the import-time totality check fails
loudly if it was forgotten.

Canonical sequences:
    standard:               pending_payment → payment_completed → processing →
                            preparing → ready_for_dispatch → out_for_delivery →
                            delivered
    preorder_international: same, with supplier_confirmed → awaiting_dispatch →
                            international_shipped → customs_clearance →
                            arrived_destination → local_dispatch inserted
                            between ready_for_dispatch and out_for_delivery

``cancelled`` and ``refunded`` are absorbing: reachable from anywhere, never
part of a sequence.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

DEFAULT_UPDATE_MESSAGE = "Order status updated"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_COMPLETED = "payment_completed"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_DISPATCH = "ready_for_dispatch"
    SUPPLIER_CONFIRMED = "supplier_confirmed"
    AWAITING_DISPATCH = "awaiting_dispatch"
    INTERNATIONAL_SHIPPED = "international_shipped"
    CUSTOMS_CLEARANCE = "customs_clearance"
    ARRIVED_DESTINATION = "arrived_destination"
    LOCAL_DISPATCH = "local_dispatch"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderType(Enum):
    STANDARD = "standard"
    PREORDER_INTERNATIONAL = "preorder_international"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"


class UpdateChannel(Enum):
    GENERAL = "general"  # POST /order/{id}/tracking
    ADMIN = "admin"  # POST /admin/orders/{id}/status
    SYSTEM = "system"  # ledger opened at placement


class StatusCategory(Enum):
    COMMON = "common"
    INTERNATIONAL = "international"
    ABSORBING = "absorbing"


class StatusTone(Enum):
    """Badge color for a status."""

    WARNING = "#f39c12"
    INFO = "#3498db"
    CONFIRMED = "#27ae60"
    TRANSIT = "#9b59b6"
    SUCCESS = "#2ecc71"
    DANGER = "#e74c3c"
    NEUTRAL = "#7f8c8d"


class StatusIcon(Enum):
    CLOCK = "clock"
    CREDIT_CARD = "credit-card"
    BOX = "box"
    TRUCK = "truck"
    CHECK_CIRCLE = "check-circle"
    ALERT = "exclamation-circle"
    UNDO = "undo"


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StatusDescriptor:
    id: OrderStatus
    label: str
    step_label: str
    category: StatusCategory
    tone: StatusTone
    icon: StatusIcon
    step: OrderStatus | None = None  # canonical step a non-sequence status occupies

    @property
    def value(self) -> str:
        return self.id.value


def _d(status, label, category, tone, icon, step_label=None, step=None):
    return StatusDescriptor(
        id=status,
        label=label,
        step_label=step_label or label,
        category=category,
        tone=tone,
        icon=icon,
        step=step,
    )


_S = OrderStatus
_COMMON = StatusCategory.COMMON
_INTL = StatusCategory.INTERNATIONAL
_ABSORBING = StatusCategory.ABSORBING

# Admin display order
_ALL = (
    _d(_S.PENDING_PAYMENT, "Pending Payment", _COMMON, StatusTone.WARNING, StatusIcon.CLOCK, "Order Placed"),
    _d(_S.PAYMENT_COMPLETED, "Payment Completed", _COMMON, StatusTone.INFO, StatusIcon.CREDIT_CARD),
    _d(_S.PROCESSING, "Processing", _COMMON, StatusTone.INFO, StatusIcon.BOX, "Processing Order"),
    _d(_S.CONFIRMED, "Confirmed", _COMMON, StatusTone.CONFIRMED, StatusIcon.CHECK_CIRCLE, step=_S.PROCESSING),
    _d(_S.PREPARING, "Preparing", _COMMON, StatusTone.INFO, StatusIcon.BOX, "Preparing for Dispatch"),
    _d(_S.READY_FOR_DISPATCH, "Ready for Dispatch", _COMMON, StatusTone.INFO, StatusIcon.TRUCK, "Rider Assigned"),
    _d(_S.SUPPLIER_CONFIRMED, "Supplier Confirmed (Intl)", _INTL, StatusTone.INFO, StatusIcon.BOX, "Supplier Confirmed"),
    _d(_S.AWAITING_DISPATCH, "Awaiting Intl Dispatch", _INTL, StatusTone.INFO, StatusIcon.BOX),
    _d(_S.INTERNATIONAL_SHIPPED, "International Shipped", _INTL, StatusTone.TRANSIT, StatusIcon.TRUCK),
    _d(_S.CUSTOMS_CLEARANCE, "Customs Clearance", _INTL, StatusTone.TRANSIT, StatusIcon.TRUCK),
    _d(_S.ARRIVED_DESTINATION, "Arrived Destination", _INTL, StatusTone.TRANSIT, StatusIcon.TRUCK),
    _d(_S.LOCAL_DISPATCH, "Local Dispatch", _INTL, StatusTone.TRANSIT, StatusIcon.TRUCK),
    _d(_S.OUT_FOR_DELIVERY, "Out for Delivery", _COMMON, StatusTone.TRANSIT, StatusIcon.TRUCK),
    _d(_S.DELIVERED, "Delivered", _COMMON, StatusTone.SUCCESS, StatusIcon.CHECK_CIRCLE),
    _d(_S.CANCELLED, "Cancelled", _ABSORBING, StatusTone.DANGER, StatusIcon.ALERT),
    _d(_S.REFUNDED, "Refunded", _ABSORBING, StatusTone.NEUTRAL, StatusIcon.UNDO),
)

_DESCRIPTORS = MappingProxyType({d.id: d for d in _ALL})

_missing = [s.value for s in OrderStatus if s not in _DESCRIPTORS]
if _missing or len(_ALL) != len(_DESCRIPTORS):
    raise RuntimeError(f"Status catalog is incomplete or duplicated: missing {_missing}")

_DOMESTIC_SEQUENCE = (
    _S.PENDING_PAYMENT,
    _S.PAYMENT_COMPLETED,
    _S.PROCESSING,
    _S.PREPARING,
    _S.READY_FOR_DISPATCH,
    _S.OUT_FOR_DELIVERY,
    _S.DELIVERED,
)

_INTERNATIONAL_LEG = (
    _S.SUPPLIER_CONFIRMED,
    _S.AWAITING_DISPATCH,
    _S.INTERNATIONAL_SHIPPED,
    _S.CUSTOMS_CLEARANCE,
    _S.ARRIVED_DESTINATION,
    _S.LOCAL_DISPATCH,
)

_INTERNATIONAL_SEQUENCE = (
    _DOMESTIC_SEQUENCE[: _DOMESTIC_SEQUENCE.index(_S.READY_FOR_DISPATCH) + 1]
    + _INTERNATIONAL_LEG
    + _DOMESTIC_SEQUENCE[_DOMESTIC_SEQUENCE.index(_S.OUT_FOR_DELIVERY) :]
)

_SEQUENCES = MappingProxyType(
    {
        OrderType.STANDARD: _DOMESTIC_SEQUENCE,
        OrderType.PREORDER_INTERNATIONAL: _INTERNATIONAL_SEQUENCE,
    }
)

_TERMINAL = frozenset({_S.DELIVERED, _S.CANCELLED, _S.REFUNDED})
_SETTLED = frozenset({PaymentStatus.PAID, PaymentStatus.COMPLETED})


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------
def _normalize(value) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value or "").strip().lower()


def parse_status(value) -> OrderStatus | None:
    """Return the catalog member for ``value``, or None if it is not a known status."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(_normalize(value))
    except ValueError:
        return None


def parse_order_type(value) -> OrderType:
    """Order types other than an international pre-order ship domestically."""
    if _normalize(value) == OrderType.PREORDER_INTERNATIONAL.value:
        return OrderType.PREORDER_INTERNATIONAL
    return OrderType.STANDARD


def is_settled(payment_status) -> bool:
    """``paid`` and ``completed`` are equivalent settled payment states."""
    try:
        return PaymentStatus(_normalize(payment_status)) in _SETTLED
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Catalog queries
# ---------------------------------------------------------------------------
def all_statuses() -> tuple[StatusDescriptor, ...]:
    return _ALL


def descriptor(status: OrderStatus) -> StatusDescriptor:
    return _DESCRIPTORS[status]


def canonical_sequence(order_type) -> tuple[OrderStatus, ...]:
    return _SEQUENCES[parse_order_type(order_type)]


def is_international_only(status) -> bool:
    parsed = parse_status(status)
    return parsed is not None and _DESCRIPTORS[parsed].category is StatusCategory.INTERNATIONAL


def is_absorbing(status) -> bool:
    parsed = parse_status(status)
    return parsed is not None and _DESCRIPTORS[parsed].category is StatusCategory.ABSORBING


def is_terminal(status) -> bool:
    return parse_status(status) in _TERMINAL


def is_applicable(status: OrderStatus, order_type) -> bool:
    """International-only statuses belong to international pre-orders."""
    if _DESCRIPTORS[status].category is StatusCategory.INTERNATIONAL:
        return parse_order_type(order_type) is OrderType.PREORDER_INTERNATIONAL
    return True


def selectable_statuses(order_type, payment_status) -> tuple[StatusDescriptor, ...]:
    """Statuses an admin may pick for an order of this type and payment state."""
    applicable = tuple(d for d in _ALL if is_applicable(d.id, order_type))
    if is_settled(payment_status):
        return applicable
    return tuple(d for d in applicable if d.id is OrderStatus.CANCELLED)


def dispatches(order_type, status) -> bool:
    """True once ``status`` is at or past ``ready_for_dispatch`` in the order's sequence."""
    parsed = parse_status(status)
    sequence = canonical_sequence(order_type)
    if parsed not in sequence:
        return False
    return sequence.index(parsed) >= sequence.index(OrderStatus.READY_FOR_DISPATCH)


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
def humanize(value) -> str:
    """``"in_transit"`` → ``"In Transit"``."""
    raw = _normalize(value)
    if not raw:
        return "Unknown"
    return " ".join(word.capitalize() for word in raw.split("_"))


def label_for(value) -> str:
    parsed = parse_status(value)
    if parsed is None:
        return humanize(value)
    return _DESCRIPTORS[parsed].label


def tone_for(value) -> StatusTone:
    parsed = parse_status(value)
    if parsed is None:
        return StatusTone.NEUTRAL
    return _DESCRIPTORS[parsed].tone


def icon_for(value) -> StatusIcon:
    parsed = parse_status(value)
    if parsed is None:
        return StatusIcon.CLOCK
    return _DESCRIPTORS[parsed].icon
