"""
Normalized error taxonomy for api-client.

Every failure that leaves the executor is an ``ApiError`` carrying an HTTP
status (or a sentinel) and a message suitable for display, except errors
raised by interceptors, which propagate unchanged.
"""
from typing import Any, Dict, Optional

import httpx

STATUS_CANCELLED = 499
STATUS_TIMEOUT = 408
STATUS_UNKNOWN = 500
STATUS_NETWORK = 503

DEFAULT_HTTP_ERROR_MESSAGE = "Request failed"
TIMEOUT_MESSAGE = "Request timed out"
NETWORK_MESSAGE = "Network error: unable to reach the server"
CANCELLED_MESSAGE = "Request was cancelled"


class ApiError(Exception):
    """Base normalized error."""

    status: int = STATUS_UNKNOWN

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "error": type(self).__name__,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class ApiTimeoutError(ApiError):
    """Raised when the deadline elapses before the response arrives."""
    status = STATUS_TIMEOUT


class ApiNetworkError(ApiError):
    """Raised when the transport cannot reach the server."""
    status = STATUS_NETWORK


class ApiHttpError(ApiError):
    """Raised for a non-2xx response."""

    def __init__(
        self,
        status: int,
        message: str = DEFAULT_HTTP_ERROR_MESSAGE,
        original_error: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
    ):
        super().__init__(message or DEFAULT_HTTP_ERROR_MESSAGE, status, original_error)
        self.response = response


class ApiCancelledError(ApiError):
    """Raised when the caller's cancellation token fires."""
    status = STATUS_CANCELLED


class ApiUnknownError(ApiError):
    """Catch-all for failures that fit no other kind."""
    status = STATUS_UNKNOWN


class ResponseDecodeError(ApiUnknownError):
    """Raised when a JSON response body cannot be decoded."""

    def __init__(self, original_error: Optional[BaseException] = None):
        super().__init__("Failed to parse response body as JSON", original_error=original_error)


class ResponseStatusError(Exception):
    """Structured non-ok signal from the response parser, normalized by the executor."""

    def __init__(self, status: int, response: httpx.Response):
        super().__init__(f"HTTP {status}")
        self.status = status
        self.response = response


def normalize_error(error: BaseException) -> ApiError:
    """Map an arbitrary exception onto the ApiError taxonomy."""
    if isinstance(error, ApiError):
        return error

    if isinstance(error, ResponseStatusError):
        from .core.response import extract_error_message
        return ApiHttpError(
            error.status,
            extract_error_message(error.response),
            original_error=error,
            response=error.response,
        )

    if isinstance(error, httpx.TimeoutException):
        return ApiTimeoutError(TIMEOUT_MESSAGE, original_error=error)

    if isinstance(error, httpx.TransportError):
        return ApiNetworkError(NETWORK_MESSAGE, original_error=error)

    return ApiUnknownError(f"Unknown error: {error}", original_error=error)
