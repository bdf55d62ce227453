"""
Request/response interceptors.
"""
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .logging_utils import LOG_PREFIX, mask_value
from .types import RequestInterceptorFn, RequestOptions, ResponseInterceptorFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interceptor:
    """Interceptor pair captured once per client and shared by every call."""
    request: Optional[RequestInterceptorFn] = None
    response: Optional[ResponseInterceptorFn] = None


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def apply_request_interceptor(
    interceptor: Interceptor, options: RequestOptions
) -> RequestOptions:
    """Run the request interceptor, if any. Errors propagate unwrapped."""
    if interceptor.request is None:
        return options
    result = await maybe_await(interceptor.request(options))
    if not isinstance(result, RequestOptions):
        raise TypeError(
            f"request interceptor must return RequestOptions, got {type(result).__name__}"
        )
    return result


async def apply_response_interceptor(interceptor: Interceptor, response: httpx.Response) -> Any:
    """Run the response interceptor, if any. Errors propagate unwrapped."""
    if interceptor.response is None:
        return response
    return await maybe_await(interceptor.response(response))


def bearer_auth(token: str) -> RequestInterceptorFn:
    """Request interceptor that sets `Authorization: Bearer <token>`."""

    def _apply(options: RequestOptions) -> RequestOptions:
        logger.debug(f"{LOG_PREFIX} bearer_auth: token={mask_value(token)}")
        return options.with_header("Authorization", f"Bearer {token}")

    return _apply


def chain_request(*interceptors: RequestInterceptorFn) -> RequestInterceptorFn:
    """Compose request interceptors, applied left to right."""

    async def _apply(options: RequestOptions) -> RequestOptions:
        for fn in interceptors:
            options = await maybe_await(fn(options))
        return options

    return _apply


def json_response(response: httpx.Response) -> Any:
    """Response interceptor returning the decoded JSON body."""
    if response.status_code == 204 or not response.content:
        return None
    return response.json()
