"""
Request options builder.
"""
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from ..types import SUPPORTED_METHODS, HttpMethod, RequestOptions, Serializer


def build_query_string(params: Optional[Mapping[str, Any]]) -> str:
    """Serialize query params with sorted keys. None values are skipped."""
    if not params:
        return ""
    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _stringify(v)) for v in value if v is not None)
        else:
            pairs.append((key, _stringify(value)))
    return urlencode(pairs)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    query = build_query_string(params)
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def build_request_options(
    method: HttpMethod,
    url: str,
    serializer: Serializer,
    body: Any = None,
    token: Optional[str] = None,
    params: Optional[Mapping[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    content_type: str = "application/json",
) -> RequestOptions:
    """Build the outgoing RequestOptions for one call."""
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"Unsupported HTTP method: {method}")

    options = RequestOptions(method=method, url=build_url(url, params))
    options = options.with_headers(headers or {})
    options = options.with_header("Content-Type", content_type)

    if token:
        options = options.with_header("Authorization", f"Bearer {token}")

    if body is not None:
        content = serializer.serialize(body).encode("utf-8")
        options = replace(options, content=content)

    return options


def join_url(base_url: str, endpoint: str) -> str:
    """Join base_url and endpoint; absolute endpoints are returned as-is."""
    if endpoint.startswith(("http://", "https://")):
        return endpoint
    if not endpoint:
        return base_url
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
