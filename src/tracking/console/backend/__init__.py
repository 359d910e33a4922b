"""Order backend abstraction — pluggable order service for the console."""

import os

_backend_instance = None


def get_backend():
    """Return the configured order backend (singleton).

    Uses HttpOrderBackend by default. Configure via the ORDER_BACKEND
    environment variable (``http`` or ``fake``).
    """
    global _backend_instance
    if _backend_instance is None:
        adapter = os.environ.get("ORDER_BACKEND", "http")
        if adapter == "http":
            from tracking.console.backend.http_adapter import HttpOrderBackend

            _backend_instance = HttpOrderBackend()
        elif adapter == "fake":
            from tracking.console.backend.fake_adapter import FakeOrderBackend

            _backend_instance = FakeOrderBackend()
        else:
            raise ValueError(f"Unknown order backend: {adapter}")
    return _backend_instance


def set_backend(backend) -> None:
    """Install a specific backend instance (useful for testing)."""
    global _backend_instance
    _backend_instance = backend


def reset_backend():
    """Reset the backend singleton (useful for testing)."""
    global _backend_instance
    _backend_instance = None
