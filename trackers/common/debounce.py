"""Debounce helper for search-as-you-type style triggers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Coalesce rapid triggers into one call of an async function.

    Each trigger() restarts the quiet window. A trigger still waiting out
    its window when the next one arrives is cancelled, so its call is never
    issued. Once the window has passed the call runs to completion.

    Usage:
        search = Debouncer(client.search, delay=0.7)
        for text in keystrokes:
            search.trigger(text)
        results = await search.wait()
    """

    def __init__(self, fn: Callable[..., Awaitable[T]], delay: float = 0.4) -> None:
        self.fn = fn
        self.delay = delay
        self._waiting: asyncio.Task[T] | None = None
        self._latest: asyncio.Task[T] | None = None

    @property
    def pending(self) -> bool:
        """True while a trigger is waiting out its quiet window."""
        return self._waiting is not None and not self._waiting.done()

    def trigger(self, *args: Any, **kwargs: Any) -> asyncio.Task[T]:
        """Schedule fn(*args, **kwargs) after the quiet window.

        Must be called from a running event loop.
        """
        if self._waiting is not None and not self._waiting.done():
            self._waiting.cancel()
        task = asyncio.get_running_loop().create_task(self._run(args, kwargs))
        self._waiting = task
        self._latest = task
        return task

    async def _run(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> T:
        await asyncio.sleep(self.delay)
        self._waiting = None
        return await self.fn(*args, **kwargs)

    async def wait(self) -> T | None:
        """Await the most recent trigger; None if it was cancelled or none ran."""
        if self._latest is None:
            return None
        try:
            return await self._latest
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return None

    def cancel(self) -> None:
        """Drop a trigger that has not fired yet."""
        if self._waiting is not None and not self._waiting.done():
            self._waiting.cancel()
        self._waiting = None
