"""
High-level ApiClient implementation.
"""
from typing import Any, Dict, Optional

import httpx

from .cancellation import CancellationToken
from .config import ClientConfig
from .core.executor import RequestExecutor
from .interceptors import Interceptor


class ApiClient(RequestExecutor):
    """
    HTTP client with GET/POST/PUT/DELETE convenience methods.

    Each method is a thin binding to ``execute`` with the HTTP method fixed.
    """

    @classmethod
    def create(cls, config: ClientConfig) -> "ApiClient":
        """Factory method to create a client."""
        return cls(config)

    @classmethod
    def from_base_url(
        cls,
        base_url: str,
        *,
        interceptor: Optional[Interceptor] = None,
        logging: bool = False,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ) -> "ApiClient":
        """Build a client from a base URL and optional settings."""
        kwargs: Dict[str, Any] = {
            "base_url": base_url,
            "interceptor": interceptor,
            "logging": logging,
            "headers": headers or {},
            "httpx_client": httpx_client,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout
        return cls(ClientConfig(**kwargs))

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        signal: Optional[CancellationToken] = None,
    ) -> Any:
        """Execute GET request."""
        return await self.execute(
            "GET", endpoint, params=params, timeout=timeout, token=token, signal=signal
        )

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        signal: Optional[CancellationToken] = None,
    ) -> Any:
        """Execute POST request."""
        return await self.execute(
            "POST", endpoint, body=body, params=params, timeout=timeout, token=token, signal=signal
        )

    async def put(
        self,
        endpoint: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        signal: Optional[CancellationToken] = None,
    ) -> Any:
        """Execute PUT request."""
        return await self.execute(
            "PUT", endpoint, body=body, params=params, timeout=timeout, token=token, signal=signal
        )

    async def delete(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        signal: Optional[CancellationToken] = None,
    ) -> Any:
        """Execute DELETE request."""
        return await self.execute(
            "DELETE", endpoint, params=params, timeout=timeout, token=token, signal=signal
        )
