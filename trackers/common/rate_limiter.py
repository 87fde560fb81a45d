"""Token-bucket rate limiter for polite API usage."""

from __future__ import annotations

import asyncio
import time


class RateLimiter:
    """Coroutine-safe token-bucket rate limiter.

    Args:
        requests_per_minute: Maximum requests allowed per minute.
    """

    def __init__(self, requests_per_minute: int = 60) -> None:
        self._interval = 60.0 / max(requests_per_minute, 1)
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Suspend until the next request is allowed."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._interval:
                await asyncio.sleep(self._interval - elapsed)
            self._last_request_time = time.monotonic()
