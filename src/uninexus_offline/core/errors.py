"""Exception hierarchy for the offline sync subsystem."""

from __future__ import annotations


class OfflineError(RuntimeError):
    """Base exception raised by the offline sync subsystem."""


class StorageError(OfflineError):
    """Raised when the durable key-value store cannot be read or written.

    Corrupt values are not storage errors; they are treated as absent by the
    stores that read them. This exception signals that the backend itself failed.
    """


class ApiError(OfflineError):
    """Base exception for failures talking to the remote UniNexus API."""


class ApiRequestError(ApiError):
    """Raised when the API answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ApiUnavailableError(ApiError):
    """Raised when the API could not be reached at the transport level."""


class OfflineDataUnavailableError(OfflineError):
    """Raised when a read fails offline and nothing usable is cached."""
