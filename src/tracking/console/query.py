"""Order reads for the console: by id, by tracking number, paginated list.

Reads are cached per key for a configurable time and retried on
``NetworkError``. ``NotFound`` and server validation errors are returned to
the caller on the first attempt. Nothing here normalises the order; display
decisions belong to ``tracking.status.projector``.
"""

import structlog
from protean.exceptions import ValidationError

from tracking.console.backend.port import OrderBackend
from tracking.console.cache import QueryCache
from tracking.console.config import ConsoleConfig
from tracking.console.errors import NetworkError
from tracking.console.models import OrderPage, OrderSnapshot

logger = structlog.get_logger(__name__)


def order_key(order_id: str) -> tuple:
    return ("order", order_id)


def tracking_key(tracking_number: str) -> tuple:
    return ("order", "tracking", tracking_number)


def list_key(page: int, limit: int) -> tuple:
    return ("orders", page, limit)


class TrackingQuery:
    def __init__(self, backend: OrderBackend, cache: QueryCache | None = None, config: ConsoleConfig | None = None):
        self.backend = backend
        self.cache = cache if cache is not None else QueryCache()
        self.config = config or ConsoleConfig()

    async def _read(self, key: tuple, max_age: float, fetch, fresh: bool):
        if not fresh:
            cached = self.cache.get(key, max_age)
            if cached is not None:
                return cached

        attempts = self.config.read_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                value = await fetch()
                break
            except NetworkError as exc:
                if attempt == attempts:
                    raise
                logger.warning("Retrying order read", key=key, attempt=attempt, error=exc.message)

        self.cache.set(key, value, max_age)
        return value

    async def by_id(self, order_id: str, fresh: bool = False) -> OrderSnapshot:
        return await self._read(
            order_key(order_id),
            self.config.order_stale_seconds,
            lambda: self.backend.get_order(order_id),
            fresh,
        )

    async def by_tracking_number(self, tracking_number: str, fresh: bool = False) -> OrderSnapshot:
        """Look up a public tracking number. The number is used as given, trimmed of whitespace."""
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            raise ValidationError({"tracking_number": ["Tracking number is required"]})
        return await self._read(
            tracking_key(tracking_number),
            self.config.tracking_stale_seconds,
            lambda: self.backend.get_order_by_tracking_number(tracking_number),
            fresh,
        )

    async def list_orders(self, page: int = 1, limit: int = 10, fresh: bool = False) -> OrderPage:
        return await self._read(
            list_key(page, limit),
            self.config.order_stale_seconds,
            lambda: self.backend.list_orders(page=page, limit=limit),
            fresh,
        )
