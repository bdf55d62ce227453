"""
Response parsing helpers.
"""
from typing import Any

import httpx

from ..exceptions import DEFAULT_HTTP_ERROR_MESSAGE, ResponseDecodeError, ResponseStatusError
from ..types import Serializer


def is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "").lower()
    return "application/json" in content_type or "+json" in content_type


def parse_response(response: httpx.Response, serializer: Serializer) -> Any:
    """
    Parse a successful response body.

    Raises ResponseStatusError for non-2xx so the executor can normalize it.
    JSON content types are decoded; an empty body yields None; anything else
    is returned as text.
    """
    if not response.is_success:
        raise ResponseStatusError(response.status_code, response)

    if not response.content:
        return None

    if is_json_response(response):
        try:
            return serializer.deserialize(response.text)
        except ValueError as e:
            raise ResponseDecodeError(original_error=e) from e

    return response.text


def extract_error_message(response: httpx.Response) -> str:
    """
    Best-effort message: JSON "message" field, else the generic fallback for
    JSON bodies. Non-JSON bodies yield their raw text.
    """
    try:
        text = response.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return DEFAULT_HTTP_ERROR_MESSAGE

    if text.strip().startswith("{"):
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message")
            if isinstance(message, str) and message:
                return message
            return DEFAULT_HTTP_ERROR_MESSAGE

    return text.strip() or DEFAULT_HTTP_ERROR_MESSAGE
