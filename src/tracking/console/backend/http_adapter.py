"""HTTP order backend — talks to the tracking API over httpx.

Maps transport and status-code failures onto the console error taxonomy:

    timeout            → RequestTimeout
    connection error   → NetworkError
    404                → NotFound
    5xx                → NetworkError
    other 4xx          → ServerValidationError (server text verbatim)
    unreadable body    → NetworkError
"""

import httpx
import structlog
from pydantic import ValidationError as PayloadError

from tracking.console.backend.port import OrderBackend
from tracking.console.config import ConsoleConfig
from tracking.console.errors import NetworkError, NotFound, RequestTimeout, ServerValidationError
from tracking.console.models import OrderPage, OrderSnapshot, unwrap

logger = structlog.get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(body, dict):
        for key in ("error", "errors", "detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and value:
                # Protean's validation handler nests field errors under "error"
                messages = [m for msgs in value.values() for m in (msgs if isinstance(msgs, list) else [msgs])]
                if messages:
                    return "; ".join(str(m) for m in messages)
            if isinstance(value, list) and value:
                first = value[0]
                return first.get("msg", str(first)) if isinstance(first, dict) else str(first)
    return response.text or response.reason_phrase


def _parse(model, body, *keys):
    try:
        return model.model_validate(unwrap(body, *keys))
    except PayloadError as exc:
        logger.error("Order backend sent an unexpected payload", model=model.__name__, errors=exc.error_count())
        raise NetworkError(f"Unexpected {model.__name__} payload from order service") from exc


class HttpOrderBackend(OrderBackend):
    def __init__(self, config: ConsoleConfig | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or ConsoleConfig.from_env()
        headers = {"X-Actor-Name": self.config.admin_name, "X-Actor-Email": self.config.admin_email}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"

        if client is None:
            client = httpx.AsyncClient(base_url=self.config.base_url, timeout=self.config.timeout)
        client.headers.update(headers)
        self._client = client

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Order backend timed out", method=method, url=url)
            raise RequestTimeout(f"Request timed out: {method} {url}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Order backend unreachable", method=method, url=url, error=str(exc))
            raise NetworkError(f"Unable to reach order service: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(_error_message(response), status_code=404)
        if response.status_code >= 500:
            logger.error("Order backend error", method=method, url=url, status_code=response.status_code)
            raise NetworkError(_error_message(response), status_code=response.status_code)
        if response.status_code >= 400:
            raise ServerValidationError(_error_message(response), status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Order backend sent an unreadable body", method=method, url=url)
            raise NetworkError(f"Unreadable response from order service: {method} {url}") from exc

    async def list_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        body = await self._request("GET", "/order", params={"page": page, "limit": limit})
        return _parse(OrderPage, body)

    async def get_order(self, order_id: str) -> OrderSnapshot:
        body = await self._request("GET", f"/order/{order_id}")
        return _parse(OrderSnapshot, body, "order")

    async def get_order_by_tracking_number(self, tracking_number: str) -> OrderSnapshot:
        body = await self._request("GET", f"/order/track/{tracking_number}")
        return _parse(OrderSnapshot, body, "order")

    async def add_tracking_update(
        self,
        order_id: str,
        status: str,
        message: str,
        location: str | None = None,
    ) -> OrderSnapshot:
        payload = {"status": status, "message": message, "location": location}
        body = await self._request("POST", f"/order/{order_id}/tracking", json=payload)
        return _parse(OrderSnapshot, body, "order")

    async def update_order_status(
        self,
        order_id: str,
        status: str,
        message: str | None = None,
        location: str | None = None,
    ) -> OrderSnapshot:
        payload = {"status": status, "message": message, "location": location}
        body = await self._request("POST", f"/admin/orders/{order_id}/status", json=payload)
        return _parse(OrderSnapshot, body, "order")

    async def confirm_payment(self, order_id: str) -> OrderSnapshot:
        body = await self._request("PATCH", f"/order/{order_id}/confirm-payment")
        return _parse(OrderSnapshot, body, "order")

    async def aclose(self) -> None:
        await self._client.aclose()
