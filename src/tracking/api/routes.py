"""FastAPI routes for the Tracking domain."""

from fastapi import APIRouter, Header, HTTPException, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from tracking.api.schemas import (
    AdminStatusUpdateRequest,
    AttributionResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    TrackingEventResponse,
    TrackingUpdateRequest,
)
from tracking.order.order import Order
from tracking.order.payment import ConfirmPayment
from tracking.order.placement import PlaceOrder
from tracking.order.tracking import AppendTrackingEvent
from tracking.status.catalog import DEFAULT_UPDATE_MESSAGE, UpdateChannel


def _order_response(order) -> OrderResponse:
    history = [
        TrackingEventResponse(
            sequence=event.sequence,
            status=event.status,
            message=event.message,
            location=event.location,
            timestamp=event.timestamp,
            updated_by=(
                AttributionResponse(name=event.updated_by.name, email=event.updated_by.email)
                if event.updated_by
                else None
            ),
        )
        for event in order.ledger
    ]
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        tracking_number=order.tracking_number,
        order_type=order.order_type,
        payment_status=order.payment_status,
        current_status=order.current_status,
        tracking_history=history,
        paid_at=order.paid_at,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _load(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found") from None


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/order", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    """Place an order and open its tracking ledger."""
    command = PlaceOrder(
        order_number=body.order_number,
        order_type=body.order_type,
        payment_status=body.payment_status,
        tracking_number=body.tracking_number,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(_load(order_id))


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> OrderListResponse:
    """Orders newest first."""
    results = (
        current_domain.repository_for(Order)
        ._dao.query.order_by("-created_at")
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    return OrderListResponse(
        orders=[_order_response(order) for order in results.items],
        total=results.total,
        page=page,
        limit=limit,
    )


# Declared before /{order_id} so "track" is not read as an id.
@order_router.get("/track/{tracking_number}", response_model=OrderResponse)
async def track_order(tracking_number: str) -> OrderResponse:
    """Look an order up by its tracking number."""
    matches = (
        current_domain.repository_for(Order)._dao.query.filter(tracking_number=tracking_number.strip()).all().items
    )
    if not matches:
        raise HTTPException(status_code=404, detail=f"No order with tracking number {tracking_number}")
    return _order_response(matches[0])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(_load(order_id))


@order_router.post("/{order_id}/tracking", response_model=OrderResponse)
async def add_tracking_update(
    order_id: str,
    body: TrackingUpdateRequest,
    x_actor_name: str = Header(default=""),
    x_actor_email: str = Header(default=""),
) -> OrderResponse:
    """Append a tracking event. The message is required on this route."""
    _load(order_id)
    command = AppendTrackingEvent(
        order_id=order_id,
        status=body.status,
        message=body.message,
        location=body.location,
        updated_by_name=x_actor_name or None,
        updated_by_email=x_actor_email or None,
        channel=UpdateChannel.GENERAL.value,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(_load(order_id))


@order_router.patch("/{order_id}/confirm-payment", response_model=OrderResponse)
async def confirm_payment(order_id: str) -> OrderResponse:
    """Settle payment. Repeating the call changes nothing."""
    _load(order_id)
    current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)
    return _order_response(_load(order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_router.post("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: AdminStatusUpdateRequest,
    x_actor_name: str = Header(default=""),
    x_actor_email: str = Header(default=""),
) -> OrderResponse:
    """Admin status change. A blank message is recorded as the default update message."""
    _load(order_id)
    command = AppendTrackingEvent(
        order_id=order_id,
        status=body.status,
        message=(body.message or "").strip() or DEFAULT_UPDATE_MESSAGE,
        location=body.location,
        updated_by_name=x_actor_name or None,
        updated_by_email=x_actor_email or None,
        channel=UpdateChannel.ADMIN.value,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(_load(order_id))
