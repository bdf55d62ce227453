"""
Request executor built on httpx.

One call is one task: build options, run the request interceptor, race the
transport against a deadline timer (and the caller's token), then parse or
hand the response to the response interceptor.
"""
import asyncio
import logging
import time
from typing import Any, Mapping, Optional

import httpx

from ..cancellation import CancellationToken, CancelReason
from ..config import ClientConfig, ResolvedConfig, resolve_config
from ..exceptions import (
    CANCELLED_MESSAGE,
    TIMEOUT_MESSAGE,
    ApiCancelledError,
    ApiTimeoutError,
    ResponseStatusError,
    normalize_error,
)
from ..interceptors import apply_request_interceptor, apply_response_interceptor
from ..logging_utils import LOG_PREFIX, log_request, log_response
from ..types import HttpMethod, RequestOptions
from .options import build_request_options, join_url
from .response import parse_response

logger = logging.getLogger(__name__)


class RequestExecutor:
    """
    Base HTTP client wrapping httpx.AsyncClient.
    """
    def __init__(self, config: ClientConfig):
        self._config_raw = config
        self._config: ResolvedConfig = resolve_config(config)
        self._client: Optional[httpx.AsyncClient] = config.httpx_client

        # Flag to track if we own the client (created it)
        self._own_client = self._client is None

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    async def connect(self) -> None:
        """Initialize the client if needed."""
        if self._client:
            return

        # The executor enforces its own deadline; httpx timeouts stay disabled
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(None),
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the client if we own it."""
        if self._own_client and self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RequestExecutor":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def execute(
        self,
        method: HttpMethod,
        endpoint: str,
        *,
        body: Any = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        signal: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Perform one request/response cycle.

        Args:
          method: GET, POST, PUT or DELETE
          endpoint: path relative to base_url
          body: JSON-serializable payload
          timeout: seconds; overrides the client default
          token: bearer credential
          params: query parameters
          signal: caller-held CancellationToken

        Raises:
          ApiError subclasses for timeout, cancellation, network, HTTP and
          unknown failures. Interceptor exceptions propagate unchanged.
        """
        if not self._client:
            await self.connect()

        assert self._client is not None

        options = build_request_options(
            method,
            join_url(self._config.base_url, endpoint),
            self._config.serializer,
            body=body,
            token=token,
            params=params,
            headers=self._config.headers,
            content_type=self._config.content_type,
        )

        interceptor = self._config.interceptor
        options = await apply_request_interceptor(interceptor, options)

        effective_timeout = timeout if timeout is not None else self._config.timeout
        response = await self._send(options, effective_timeout, signal)

        if not response.is_success:
            status_error = ResponseStatusError(response.status_code, response)
            raise normalize_error(status_error) from status_error

        if interceptor.response is not None:
            return await apply_response_interceptor(interceptor, response)

        return parse_response(response, self._config.serializer)

    async def _send(
        self,
        options: RequestOptions,
        timeout: float,
        signal: Optional[CancellationToken],
    ) -> httpx.Response:
        """Issue the request, racing it against the deadline and the caller's token."""
        assert self._client is not None

        if signal is not None and signal.cancelled:
            raise ApiCancelledError(CANCELLED_MESSAGE)

        try:
            request = self._client.build_request(
                options.method,
                options.url,
                headers=dict(options.headers),
                content=options.content,
            )
        except Exception as e:
            raise normalize_error(e) from e

        logger.debug(f"{LOG_PREFIX} Request: {options.method} {request.url}")
        if self._config.logging:
            log_request(options.method, str(request.url), options.headers, options.content)

        start_time = time.perf_counter()
        loop = asyncio.get_running_loop()
        deadline = CancellationToken()
        timer = loop.call_later(timeout, deadline.cancel, CancelReason.TIMEOUT)

        send_task = asyncio.ensure_future(self._client.send(request))
        waiters = [asyncio.ensure_future(deadline.wait())]
        if signal is not None:
            waiters.append(asyncio.ensure_future(signal.wait()))

        try:
            done, _ = await asyncio.wait(
                {send_task, *waiters}, return_when=asyncio.FIRST_COMPLETED
            )

            if send_task in done:
                try:
                    response = send_task.result()
                except Exception as e:
                    logger.error(f"{LOG_PREFIX} Request failed: {e}")
                    raise normalize_error(e) from e
                if self._config.logging:
                    log_response(response, start_time)
                return response

            await _cancel_and_wait(send_task)
            if deadline.cancelled:
                logger.warning(
                    f"{LOG_PREFIX} Request timed out after {timeout}s: {options.method} {request.url}"
                )
                raise ApiTimeoutError(TIMEOUT_MESSAGE)
            logger.info(f"{LOG_PREFIX} Request cancelled: {options.method} {request.url}")
            raise ApiCancelledError(CANCELLED_MESSAGE)
        finally:
            timer.cancel()
            for waiter in waiters:
                waiter.cancel()
            if not send_task.done():
                await _cancel_and_wait(send_task)


async def _cancel_and_wait(task: "asyncio.Future[Any]") -> None:
    task.cancel()
    await asyncio.wait({task})
    if not task.cancelled() and task.exception() is not None:
        logger.debug(
            f"{LOG_PREFIX} Cancelled request finished with {type(task.exception()).__name__}"
        )
