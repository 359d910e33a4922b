"""Pydantic API schemas for the Tracking domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    order_number: str
    order_type: str = "standard"
    payment_status: str = "pending"
    tracking_number: str | None = None


class TrackingUpdateRequest(BaseModel):
    status: str
    message: str
    location: str | None = None


class AdminStatusUpdateRequest(BaseModel):
    status: str
    message: str | None = None
    location: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class AttributionResponse(BaseModel):
    name: str | None = None
    email: str | None = None


class TrackingEventResponse(BaseModel):
    sequence: int
    status: str
    message: str
    location: str | None = None
    timestamp: datetime
    updated_by: AttributionResponse | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    tracking_number: str | None = None
    order_type: str
    payment_status: str
    current_status: str
    tracking_history: list[TrackingEventResponse] = Field(default_factory=list)
    paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    limit: int
