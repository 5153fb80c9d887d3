"""Backend failure taxonomy.

Every backend call either returns domain snapshots or raises a BackendError
subclass. The worker collapses all of them into one ``Error`` action.
"""


class BackendError(Exception):
    """Base class for every failure a backend call can raise."""


class BackendConnectionError(BackendError):
    """The service could not be reached."""


class BackendNotFound(BackendError):
    """The requested resource does not exist."""


class BackendRequestFailed(BackendError):
    """The service answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class BackendParseError(BackendError):
    """The response could not be decoded into domain snapshots."""


class BackendConfigError(BackendError):
    """The client is misconfigured (bad address, bad credentials format)."""


class BackendTimeout(BackendError):
    """The request did not complete in time."""
