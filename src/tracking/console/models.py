"""Console-side order models.

The backend speaks snake_case; older payloads use camelCase, ``_id`` and an
``orderStatus`` / ``status`` field for the current status. These models accept
either shape and normalise status strings to lower case. They are read-only
snapshots: the console never mutates an order locally except through the
optimistic coordinator's speculative entry.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tracking.status.catalog import OrderStatus


def _lower(value):
    if value is None:
        return value
    return str(value).strip().lower()


class _Wire(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Attribution(_Wire):
    name: str | None = None
    email: str | None = None


class TrackingEntry(_Wire):
    status: str
    message: str = ""
    location: str | None = None
    timestamp: datetime | None = None
    updated_by: Attribution | None = None
    sequence: int | None = None
    speculative: bool = False

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return _lower(value)


class OrderSnapshot(_Wire):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    order_number: str | None = None
    tracking_number: str | None = None
    order_type: str = "standard"
    payment_status: str = "pending"
    current_status: str = OrderStatus.PENDING_PAYMENT.value
    tracking_history: list[TrackingEntry] = Field(default_factory=list)
    paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_current_status(cls, data: Any) -> Any:
        """First of currentStatus / status / orderStatus that is present wins."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("current_status", "currentStatus", "status", "orderStatus", "order_status"):
            if data.get(key):
                data["current_status"] = data[key]
                break
        data.pop("currentStatus", None)
        return data

    @field_validator("current_status", "payment_status", "order_type", mode="before")
    @classmethod
    def normalize_statuses(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return _lower(value)

    def with_entry(self, entry: TrackingEntry) -> "OrderSnapshot":
        """Copy of this snapshot with ``entry`` appended and made current."""
        return self.model_copy(
            update={
                "tracking_history": [*self.tracking_history, entry],
                "current_status": entry.status,
            }
        )


class OrderPage(_Wire):
    orders: list[OrderSnapshot] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10


def unwrap(payload: Any, *keys: str) -> Any:
    """Peel ``{"data": ...}`` envelopes and named wrappers off a response body.

    ``{"data": {"data": doc}}``, ``{"data": {"order": doc}}`` and a bare ``doc``
    all yield ``doc``.
    """
    while isinstance(payload, dict):
        for key in ("data", *keys):
            if key in payload and isinstance(payload[key], dict | list):
                payload = payload[key]
                break
        else:
            return payload
    return payload
