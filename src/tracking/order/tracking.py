"""Ledger append — command and handler.

The single mutation path for an order's tracking state. The guard, the
history append and the ``current_status`` change happen on one aggregate and
are persisted by one repository write.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from tracking.domain import tracking
from tracking.order.order import Attribution, Order
from tracking.status.catalog import UpdateChannel

logger = structlog.get_logger(__name__)


@tracking.command(part_of="Order")
class AppendTrackingEvent:
    """Record a status change on the order's tracking ledger."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    message = String(max_length=500)
    location = String(max_length=200)
    updated_by_name = String(max_length=100)
    updated_by_email = String(max_length=254)
    channel = String(max_length=20, choices=UpdateChannel, default=UpdateChannel.GENERAL.value)


@tracking.command_handler(part_of=Order)
class TrackingLedgerHandler:
    @handle(AppendTrackingEvent)
    def append_tracking_event(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        updated_by = None
        if command.updated_by_name or command.updated_by_email:
            updated_by = Attribution(
                name=command.updated_by_name or "",
                email=command.updated_by_email or "",
            )

        event = order.append_tracking_event(
            status=command.status,
            message=command.message or "",
            location=command.location,
            updated_by=updated_by,
            channel=UpdateChannel(command.channel or UpdateChannel.GENERAL.value),
        )
        repo.add(order)

        logger.info(
            "Tracking event appended",
            order_id=str(order.id),
            status=event.status,
            sequence=event.sequence,
            channel=command.channel,
        )
        return str(order.id)
