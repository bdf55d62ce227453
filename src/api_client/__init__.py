"""
API Client - minimal async HTTP client wrapper
"""

__version__ = "0.1.0"

from .cancellation import CancellationToken, CancelReason
from .config import ClientConfig, DEFAULT_TIMEOUT
from .types import HttpMethod, RequestOptions
from .client import ApiClient
from .core.executor import RequestExecutor
from .core.options import build_query_string, build_request_options
from .core.response import extract_error_message, parse_response
from .exceptions import (
    ApiError,
    ApiTimeoutError,
    ApiNetworkError,
    ApiHttpError,
    ApiCancelledError,
    ApiUnknownError,
    ResponseDecodeError,
    normalize_error,
)
from .interceptors import Interceptor, bearer_auth, chain_request, json_response

__all__ = [
    "ClientConfig", "DEFAULT_TIMEOUT",
    "HttpMethod", "RequestOptions",
    "ApiClient", "RequestExecutor",
    "CancellationToken", "CancelReason",
    "build_query_string", "build_request_options",
    "extract_error_message", "parse_response",
    "ApiError", "ApiTimeoutError", "ApiNetworkError", "ApiHttpError",
    "ApiCancelledError", "ApiUnknownError", "ResponseDecodeError", "normalize_error",
    "Interceptor", "bearer_auth", "chain_request", "json_response",
]
