"""Async HTTP client with rate limiting, retry, and typed failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import HTTPSettings, settings
from .errors import FetchError
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """HTTP client wrapping httpx.AsyncClient for JSON APIs.

    Features:
    - Rate limiting (token bucket)
    - Automatic retries with exponential backoff on 5xx, 429 and
      transport errors
    - Every failure surfaces as FetchError naming the operation
    """

    def __init__(
        self,
        config: HTTPSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or settings.http
        self._rate_limiter = RateLimiter(self.config.rate_limit_rpm)
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            headers={"User-Agent": self.config.user_agent},
            transport=transport,
            follow_redirects=True,
        )

    async def get_json(
        self,
        url: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a GET request and decode the JSON body.

        Args:
            url: Target URL.
            operation: Name used in logs and in FetchError.
            params: Query parameters.
            headers: Extra headers (merged with defaults).

        Returns:
            Decoded JSON document.

        Raises:
            FetchError: After all retries are exhausted, on a non-retryable
                HTTP status, or when the body is not JSON.
        """
        response = await self._request("GET", url, operation=operation, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(operation, f"invalid JSON body: {exc}", response.status_code) from exc

    async def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        attempts = max(self.config.max_retries, 1)
        for attempt in range(attempts):
            await self._rate_limiter.wait()
            try:
                resp = await self._client.request(method, url, params=params, headers=headers)
                resp.raise_for_status()
                return resp

            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                last_exc = FetchError(operation, _error_text(exc.response), status)

                # Don't retry on 4xx client errors (except 429 rate limit)
                if 400 <= status < 500 and status != 429:
                    logger.warning("%s failed (HTTP %d, no retry)", operation, status)
                    raise last_exc from exc

            except httpx.HTTPError as exc:
                last_exc = FetchError(operation, str(exc) or type(exc).__name__)

            if attempt + 1 == attempts:
                logger.error("%s failed after %d attempts: %s", operation, attempts, last_exc)
                raise last_exc

            wait_time = self.config.backoff_base ** attempt if self.config.backoff_base > 0 else 0.0
            logger.warning(
                "%s failed (attempt %d/%d): %s, retrying in %.1fs",
                operation,
                attempt + 1,
                attempts,
                last_exc.message,
                wait_time,
            )
            await asyncio.sleep(wait_time)

    async def aclose(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncHTTPClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def _error_text(response: httpx.Response) -> str:
    text = response.text or response.reason_phrase
    return text[:120]
