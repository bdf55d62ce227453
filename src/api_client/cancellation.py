"""
Cooperative cancellation for in-flight requests.
"""
import asyncio
from enum import Enum
from typing import Optional


class CancelReason(str, Enum):
    TIMEOUT = "timeout"
    EXTERNAL = "external"


class CancellationToken:
    """
    One-shot cancellation capability.

    The executor's deadline timer and the caller both hold a token; the
    transport race waits on it. Cancelling an already-cancelled token is a
    no-op and keeps the first reason.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[CancelReason] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[CancelReason]:
        return self._reason

    def cancel(self, reason: CancelReason = CancelReason.EXTERNAL) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> CancelReason:
        """Block until cancelled and return the reason."""
        await self._event.wait()
        assert self._reason is not None
        return self._reason

    def __repr__(self) -> str:
        state = self._reason.value if self._reason else "active"
        return f"CancellationToken({state})"
