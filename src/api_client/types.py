"""
Core type definitions for api-client.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Protocol, Union, runtime_checkable

import httpx

# HTTP Methods
HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


@dataclass(frozen=True)
class RequestOptions:
    """Outgoing request options. Interceptors return a new value instead of mutating."""
    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def with_header(self, name: str, value: str) -> "RequestOptions":
        """Return a copy with `name` set, replacing any casing of the same header."""
        lowered = name.lower()
        headers = {k: v for k, v in self.headers.items() if k.lower() != lowered}
        headers[name] = value
        return replace(self, headers=headers)

    def with_headers(self, headers: Mapping[str, str]) -> "RequestOptions":
        options = self
        for name, value in headers.items():
            options = options.with_header(name, value)
        return options

    def without_header(self, name: str) -> "RequestOptions":
        lowered = name.lower()
        return replace(self, headers={k: v for k, v in self.headers.items() if k.lower() != lowered})


RequestInterceptorFn = Callable[[RequestOptions], Union[RequestOptions, Awaitable[RequestOptions]]]
ResponseInterceptorFn = Callable[[httpx.Response], Any]


@runtime_checkable
class Serializer(Protocol):
    """Protocol for serialization."""
    def serialize(self, data: Any) -> str: ...
    def deserialize(self, data: str) -> Any: ...
