"""Console configuration, read from the environment."""

import os
from dataclasses import dataclass

from tracking.status.catalog import UpdateChannel


def _float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw else default


def _int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


@dataclass(frozen=True)
class ConsoleConfig:
    base_url: str = "http://localhost:8000"
    timeout: float = 10.0
    api_token: str | None = None
    admin_name: str = "Admin"
    admin_email: str = ""
    channel: UpdateChannel = UpdateChannel.ADMIN
    order_stale_seconds: float = 300.0
    tracking_stale_seconds: float = 120.0
    read_retries: int = 2

    @classmethod
    def from_env(cls) -> "ConsoleConfig":
        return cls(
            base_url=os.environ.get("TRACKING_API_URL", cls.base_url).rstrip("/"),
            timeout=_float("TRACKING_API_TIMEOUT", cls.timeout),
            api_token=os.environ.get("TRACKING_API_TOKEN") or None,
            admin_name=os.environ.get("TRACKING_ADMIN_NAME", cls.admin_name),
            admin_email=os.environ.get("TRACKING_ADMIN_EMAIL", cls.admin_email),
            channel=UpdateChannel(os.environ.get("TRACKING_CHANNEL", cls.channel.value).lower()),
            order_stale_seconds=_float("TRACKING_ORDER_STALE_SECONDS", cls.order_stale_seconds),
            tracking_stale_seconds=_float("TRACKING_TRACKING_STALE_SECONDS", cls.tracking_stale_seconds),
            read_retries=_int("TRACKING_READ_RETRIES", cls.read_retries),
        )
