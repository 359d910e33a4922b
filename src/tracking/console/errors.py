"""Console error taxonomy.

Everything the console raises after a request has been attempted. Guard
rejections are not here: they are ``tracking.status.guard.GuardError`` and
never reach the network.
"""


class ConsoleError(Exception):
    """Base class for failures reported by the order backend."""

    retryable = False

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFound(ConsoleError):
    """The order (or tracking number) does not exist."""


class NetworkError(ConsoleError):
    """Transport failure or a 5xx response. Reads may retry; appends never do."""

    retryable = True


class RequestTimeout(NetworkError):
    pass


class ServerValidationError(ConsoleError):
    """The backend rejected the request. ``message`` is the server's text verbatim."""


class UpdateInFlight(ConsoleError):
    """A status update was submitted while another one is still pending."""

    def __init__(self, message: str = "A status update is already in progress"):
        super().__init__(message)
