"""Error kinds raised by the sale flow."""

from __future__ import annotations


class PosError(Exception):
    """Base class for errors that end up as user notifications."""


class ValidationError(PosError):
    """Local input rejected before any network call."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = dict(field_errors or {})


class NotFoundError(PosError):
    """A lookup produced no match."""


class StockError(PosError):
    """Requested quantity is above the available stock."""


class RemoteError(PosError):
    """The backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, server_message: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class BestEffortFailure(PosError):
    """A non-blocking call failed; logged, never shown."""
