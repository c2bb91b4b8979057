"""Application exception types."""

from photolibrary.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class LoginRequiredError(Exception):
    """Raised when a request carries no authenticated session."""


class BridgeError(Exception):
    """Base class for failures of an authorized downstream call."""


class UnauthorizedError(BridgeError):
    """No authorized client could be resolved for the principal."""

    def __init__(self, registration_id: str) -> None:
        self.registration_id = registration_id
        super().__init__(f"No authorized client for registration {registration_id!r}")


class UpstreamFailureError(BridgeError):
    """Resource server returned a non-success status or an unparseable body."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class TransportError(UpstreamFailureError):
    """Resource server could not be reached."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None, body="")


__all__ = [
    "ApiError",
    "BridgeError",
    "LoginRequiredError",
    "TransportError",
    "UnauthorizedError",
    "UpstreamFailureError",
]
