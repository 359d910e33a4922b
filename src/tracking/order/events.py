"""Tracking domain events — immutable facts about an order's tracking ledger.

All events are past tense, versioned, and carry enough data for downstream
consumers to rebuild a tracking view without reading the aggregate.
"""

from protean.fields import DateTime, Identifier, Integer, String

from tracking.domain import tracking


@tracking.event(part_of="Order")
class OrderPlaced:
    """An order was placed and its ledger opened."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    order_type = String(required=True)
    payment_status = String(required=True)
    tracking_number = String()
    placed_at = DateTime(required=True)


@tracking.event(part_of="Order")
class TrackingEventAppended:
    """A status change was appended to the order's tracking ledger."""

    __version__ = 1

    order_id = Identifier(required=True)
    sequence = Integer(required=True)
    status = String(required=True)
    previous_status = String()
    message = String(required=True)
    location = String()
    updated_by_name = String()
    updated_by_email = String()
    channel = String(required=True)
    appended_at = DateTime(required=True)


@tracking.event(part_of="Order")
class PaymentConfirmed:
    """Payment was marked settled. No ledger entry is written for it."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_status = String(required=True)
    paid_at = DateTime(required=True)


@tracking.event(part_of="Order")
class TrackingNumberAssigned:
    """A tracking number was assigned when the order reached dispatch."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    assigned_at = DateTime(required=True)
