"""Console side of the tracking ledger.

Appends go through the transition guard before any request is made, then
to the configured route. On success every cached view of the order is
dropped so the next read reflects the server. Appends are never retried:
a repeated status is a new ledger entry.
"""

import structlog

from tracking.console.backend.port import OrderBackend
from tracking.console.cache import QueryCache
from tracking.console.config import ConsoleConfig
from tracking.console.models import OrderSnapshot
from tracking.console.query import order_key, tracking_key
from tracking.status import guard
from tracking.status.catalog import UpdateChannel

logger = structlog.get_logger(__name__)


class TrackingLedger:
    def __init__(self, backend: OrderBackend, cache: QueryCache, config: ConsoleConfig | None = None):
        self.backend = backend
        self.cache = cache
        self.config = config or ConsoleConfig()

    async def append(
        self,
        order: OrderSnapshot,
        status: str,
        message: str = "",
        location: str | None = None,
    ) -> OrderSnapshot:
        """Append ``status`` to ``order``'s ledger and return the server's order.

        Raises ``GuardError`` without contacting the backend when the guard
        rejects the status.
        """
        guard.validate(order, status)

        if self.config.channel is UpdateChannel.GENERAL:
            updated = await self.backend.add_tracking_update(order.id, status, message, location or None)
        else:
            updated = await self.backend.update_order_status(order.id, status, message or None, location or None)

        logger.info(
            "Tracking update sent",
            order_id=order.id,
            status=status,
            channel=self.config.channel.value,
        )
        self.invalidate(order, updated)
        return updated

    async def confirm_payment(self, order: OrderSnapshot) -> OrderSnapshot:
        updated = await self.backend.confirm_payment(order.id)
        logger.info("Payment confirmed", order_id=order.id, payment_status=updated.payment_status)
        self.invalidate(order, updated)
        return updated

    def invalidate(self, *orders: OrderSnapshot) -> None:
        """Drop the cached detail, tracking and listing views of ``orders``."""
        self.cache.invalidate("orders")
        for order in orders:
            self.cache.invalidate(*order_key(order.id))
            if order.tracking_number:
                self.cache.invalidate(*tracking_key(order.tracking_number))
