"""Admin console client for order tracking."""

from tracking.console.service import TrackingConsole

__all__ = ["TrackingConsole"]
