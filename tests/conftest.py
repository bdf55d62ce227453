"""
Shared fixtures for api_client tests.
"""
import asyncio
from typing import Any, Dict

import httpx
import pytest

BASE_URL = "https://example.com"


def delayed_transport(delay: float, state: Dict[str, Any], status: int = 200, json: Any = None):
    """MockTransport whose handler sleeps before answering and records cancellation."""

    async def handler(request: httpx.Request) -> httpx.Response:
        state["calls"] = state.get("calls", 0) + 1
        state["request"] = request
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise
        return httpx.Response(status, json=json if json is not None else {"ok": True})

    return httpx.MockTransport(handler)


@pytest.fixture
def state() -> Dict[str, Any]:
    return {"calls": 0, "cancelled": False}


@pytest.fixture
def base_url() -> str:
    return BASE_URL
