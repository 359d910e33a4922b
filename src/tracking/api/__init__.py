"""Tracking domain API package."""

from tracking.api.routes import admin_router, order_router

__all__ = ["order_router", "admin_router"]
