"""Failures raised by the backend clients."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for anything that went wrong talking to the backend."""


class NetworkError(StoreError):
    """Transport failure or a non-success status without a usable message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(StoreError):
    """The backend rejected a submission and said why."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LoadFailure(StoreError):
    """A listing could not be loaded; wraps the underlying error."""

    def __init__(self, cause: StoreError) -> None:
        super().__init__(str(cause))
        self.cause = cause
