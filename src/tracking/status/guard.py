"""Transition guard — decides whether a requested status may be appended.

The guard is the only business rule between an admin and the ledger. It looks
at the order's type and payment state, never at its current status: moving
"backward" is allowed so that mistakes can be corrected.

Both the console (before any network call) and the Order aggregate (before
persisting) run the same checks.
"""

from protean.exceptions import ValidationError

from tracking.status.catalog import (
    OrderStatus,
    is_applicable,
    is_settled,
    label_for,
    parse_status,
)


class GuardError(ValidationError):
    """A requested status was rejected before reaching the ledger."""

    default_message = "Status change is not allowed"

    def __init__(self, requested_status=None, message: str | None = None):
        self.requested_status = requested_status
        self.message = message or self.default_message
        super().__init__({"status": [self.message]})


class NotInCatalog(GuardError):
    default_message = "Please select a status"


class NotApplicableToOrderType(GuardError):
    default_message = "This status only applies to international pre-orders"


class PaymentPending(GuardError):
    default_message = "Cannot update status while payment is pending. You may only cancel unpaid orders."


def validate(order, requested_status) -> None:
    """Raise a ``GuardError`` if ``requested_status`` may not be appended to ``order``.

    ``order`` is anything exposing ``order_type`` and ``payment_status``:
    the Order aggregate on the backend, an ``OrderSnapshot`` in the console.
    """
    status = parse_status(requested_status)
    if status is None:
        if requested_status:
            raise NotInCatalog(requested_status, f"Unknown status '{requested_status}'")
        raise NotInCatalog(requested_status)

    if not is_applicable(status, order.order_type):
        raise NotApplicableToOrderType(
            requested_status,
            f"'{label_for(status)}' only applies to international pre-orders",
        )

    if status is not OrderStatus.CANCELLED and not is_settled(order.payment_status):
        raise PaymentPending(requested_status)


def is_admissible(order, requested_status) -> bool:
    try:
        validate(order, requested_status)
    except GuardError:
        return False
    return True
