"""TrackingConsole — the admin console's entry point to order tracking.

Wires configuration, the order backend, the read cache, queries and the
ledger client together, and hands out one optimistic coordinator per order
view.

Usage:
    async with TrackingConsole() as console:
        order = await console.order(order_id)
        update = console.coordinator(order)
        outcome = await update.submit("processing", "Packed at hub")
"""

from collections.abc import Callable

from tracking.console.backend import get_backend
from tracking.console.backend.port import OrderBackend
from tracking.console.cache import QueryCache
from tracking.console.config import ConsoleConfig
from tracking.console.ledger import TrackingLedger
from tracking.console.models import Attribution, OrderPage, OrderSnapshot
from tracking.console.optimistic import OptimisticUpdateCoordinator, UpdateOutcome
from tracking.console.query import TrackingQuery
from tracking.status import projector
from tracking.status.catalog import StatusDescriptor, selectable_statuses


class TrackingConsole:
    def __init__(
        self,
        backend: OrderBackend | None = None,
        config: ConsoleConfig | None = None,
        cache: QueryCache | None = None,
    ):
        self.config = config or ConsoleConfig.from_env()
        self.backend = backend or get_backend()
        self.cache = cache if cache is not None else QueryCache()
        self.query = TrackingQuery(self.backend, self.cache, self.config)
        self.ledger = TrackingLedger(self.backend, self.cache, self.config)
        self.admin = Attribution(name=self.config.admin_name, email=self.config.admin_email)

    async def __aenter__(self) -> "TrackingConsole":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.backend.aclose()

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    async def order(self, order_id: str, fresh: bool = False) -> OrderSnapshot:
        return await self.query.by_id(order_id, fresh=fresh)

    async def track(self, tracking_number: str, fresh: bool = False) -> OrderSnapshot:
        return await self.query.by_tracking_number(tracking_number, fresh=fresh)

    async def orders(self, page: int = 1, limit: int = 10, fresh: bool = False) -> OrderPage:
        return await self.query.list_orders(page=page, limit=limit, fresh=fresh)

    # -------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------
    def status_options(self, order: OrderSnapshot) -> tuple[StatusDescriptor, ...]:
        return selectable_statuses(order.order_type, order.payment_status)

    def timeline(self, order: OrderSnapshot) -> list[projector.TimelineStep]:
        return projector.build_timeline(order)

    def display_status(self, order: OrderSnapshot) -> str:
        return projector.display_status(order)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def coordinator(
        self,
        order: OrderSnapshot,
        on_change: Callable[[OptimisticUpdateCoordinator], None] | None = None,
    ) -> OptimisticUpdateCoordinator:
        return OptimisticUpdateCoordinator(order, self.ledger, self.query, self.admin, on_change)

    async def update_status(
        self,
        order: OrderSnapshot,
        status: str,
        message: str = "",
        location: str = "",
    ) -> UpdateOutcome:
        """One-shot optimistic update for callers that do not keep a coordinator."""
        return await self.coordinator(order).submit(status, message, location)

    async def confirm_payment(self, order: OrderSnapshot) -> OrderSnapshot:
        return await self.ledger.confirm_payment(order)
