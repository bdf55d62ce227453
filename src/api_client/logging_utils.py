"""
Logging helpers for request/response tracing.

Logging is best effort: helpers here never raise into the request path.
"""
import json
import logging
import time
from typing import Any, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

LOG_PREFIX = "[ApiClient]"
MAX_BODY_CHARS = 5000
SENSITIVE_HEADERS = ("authorization", "x-api-key", "cookie", "proxy-authorization")


def mask_value(val: Optional[str]) -> str:
    """Mask sensitive value for logging, showing first 10 chars."""
    if not val:
        return "<empty>"
    if len(val) <= 10:
        return "*" * len(val)
    return val[:10] + "*" * (len(val) - 10)


def mask_headers(headers: Mapping[str, str]) -> dict:
    return {
        k: mask_value(v) if k.lower() in SENSITIVE_HEADERS else v
        for k, v in headers.items()
    }


def format_body(body: Any) -> str:
    """
    Format body for logging safeguards against binary data.
    """
    if body is None:
        return "<empty>"
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data: {len(body)} bytes>"
    if isinstance(body, str):
        try:
            if body.strip().startswith(("{", "[")):
                return json.dumps(json.loads(body), indent=2)
        except json.JSONDecodeError:
            pass
        if len(body) > MAX_BODY_CHARS:
            return body[:MAX_BODY_CHARS] + "... (truncated)"
        return body
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, default=str)
    return str(body)


def log_request(method: str, url: str, headers: Mapping[str, str], content: Optional[bytes]) -> None:
    try:
        logger.info(
            f"{LOG_PREFIX} -----[{method}] REQUEST-----\n"
            f"[URL]: {url}\n"
            f"[HEADERS]: {mask_headers(headers)}\n"
            f"[BODY]: {format_body(content) if content else 'No body data'}"
        )
    except Exception as e:
        logger.warning(f"{LOG_PREFIX} Failed to log request: {e}")


def log_response(response: httpx.Response, start_time: float) -> None:
    try:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{LOG_PREFIX} -------RESPONSE-------\n"
            f"[STATUS]: {response.status_code}\n"
            f"[DURATION]: {duration_ms:.2f} ms\n"
            f"[RESPONSE BODY]: {format_body(response.content)}"
        )
    except Exception as e:
        logger.warning(f"{LOG_PREFIX} Failed to log response: {e}")
