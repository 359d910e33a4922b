"""Order backend port — what the console needs from the order service.

The console programs against this port; adapters are swapped via
configuration. Every method returns the backend's view of the order after
the call, and raises a ``tracking.console.errors.ConsoleError`` on failure.
"""

from abc import ABC, abstractmethod

from tracking.console.models import OrderPage, OrderSnapshot


class OrderBackend(ABC):
    """Abstract interface for order backend adapters."""

    @abstractmethod
    async def list_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        """Orders newest first."""
        ...

    @abstractmethod
    async def get_order(self, order_id: str) -> OrderSnapshot:
        """Raises NotFound if the id is unknown."""
        ...

    @abstractmethod
    async def get_order_by_tracking_number(self, tracking_number: str) -> OrderSnapshot:
        """Raises NotFound if no order carries the tracking number."""
        ...

    @abstractmethod
    async def add_tracking_update(
        self,
        order_id: str,
        status: str,
        message: str,
        location: str | None = None,
    ) -> OrderSnapshot:
        """General tracking route. ``message`` is required by the server."""
        ...

    @abstractmethod
    async def update_order_status(
        self,
        order_id: str,
        status: str,
        message: str | None = None,
        location: str | None = None,
    ) -> OrderSnapshot:
        """Admin status route."""
        ...

    @abstractmethod
    async def confirm_payment(self, order_id: str) -> OrderSnapshot:
        ...

    async def aclose(self) -> None:
        """Release any connections held by the adapter."""
