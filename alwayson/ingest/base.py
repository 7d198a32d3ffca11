"""
Base API client with rate limiting and retry logic.

The usage API client inherits from this base class.
"""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from alwayson.core.exceptions import DataFetchError, RateLimitError
from alwayson.ingest.rate_limiter import SlidingWindowLimiter


logger = logging.getLogger(__name__)


def parse_retry_after(value: str | None, default: int = 60) -> int:
    """
    Seconds to wait from a Retry-After header.

    The header holds either delay-seconds or an HTTP-date. Dates in the
    past give 0; a missing or unreadable header gives the default.
    """
    if value is None:
        return default
    try:
        return max(0, int(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0, math.ceil((when - datetime.now(timezone.utc)).total_seconds()))


class BaseAPIClient(ABC):
    """
    Abstract base class for API clients.

    Provides:
    - Async HTTP requests with httpx
    - Rate limiting over a sliding one-minute window
    - Automatic retry with exponential backoff
    """

    SOURCE_NAME: str = "base"  # Override in subclasses

    def __init__(
        self,
        base_url: str,
        rate_limiter: SlidingWindowLimiter,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize API client.

        Args:
            base_url: Base URL for API requests
            rate_limiter: Rate limiter instance
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per request
            backoff_base: Seconds to wait before the first retry; doubles per attempt
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Return authentication headers. Override in subclasses."""
        ...

    async def __aenter__(self) -> "BaseAPIClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "Accept": "application/json",
                **self._auth_headers(),
            },
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        site_hash: str | None = None,
    ) -> dict[str, Any]:
        """
        Make an API request with rate limiting and retry.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            params: Query parameters
            site_hash: Site the request is about, for error context

        Returns:
            JSON response data
        """
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        rate_limited = False
        retry_after: int | None = None

        for attempt in range(self.max_retries):
            await self.rate_limiter.acquire()

            try:
                response = await self._client.request(method, endpoint, params=params)
                response.raise_for_status()
                return self._decode(response, site_hash)

            except httpx.HTTPStatusError as e:
                status = e.response.status_code

                if status == 429:  # Rate limited
                    rate_limited = True
                    retry_after = parse_retry_after(e.response.headers.get("Retry-After"))
                    logger.warning(
                        f"Rate limited by {self.SOURCE_NAME}, "
                        f"waiting {retry_after}s (attempt {attempt + 1})"
                    )
                    if attempt + 1 < self.max_retries:
                        await asyncio.sleep(retry_after)
                    continue

                elif status >= 500:  # Server error
                    rate_limited = False
                    wait = self.backoff_base * 2 ** attempt
                    logger.warning(
                        f"Server error from {self.SOURCE_NAME}: {status}, "
                        f"retrying in {wait}s (attempt {attempt + 1})"
                    )
                    if attempt + 1 < self.max_retries:
                        await asyncio.sleep(wait)
                    continue

                else:  # Client error - don't retry
                    raise DataFetchError(
                        f"API request failed: {e}",
                        source=self.SOURCE_NAME,
                        site_hash=site_hash,
                        status_code=status,
                    ) from e

            except httpx.RequestError as e:
                rate_limited = False
                wait = self.backoff_base * 2 ** attempt
                logger.warning(
                    f"Request error to {self.SOURCE_NAME}: {e}, "
                    f"retrying in {wait}s (attempt {attempt + 1})"
                )
                if attempt + 1 < self.max_retries:
                    await asyncio.sleep(wait)
                continue

        if rate_limited:
            raise RateLimitError(self.SOURCE_NAME, retry_after=retry_after)

        # All retries exhausted
        raise DataFetchError(
            f"Max retries ({self.max_retries}) exceeded for {endpoint}",
            source=self.SOURCE_NAME,
            site_hash=site_hash,
        )

    async def _get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        site_hash: str | None = None,
    ) -> dict[str, Any]:
        """Convenience method for GET requests."""
        return await self._request("GET", endpoint, params, site_hash)

    def _decode(self, response: httpx.Response, site_hash: str | None) -> Any:
        """Parse a successful response body as JSON."""
        try:
            return response.json()
        except ValueError as e:
            raise DataFetchError(
                f"Response from {response.request.url.path} is not valid JSON",
                source=self.SOURCE_NAME,
                site_hash=site_hash,
                status_code=response.status_code,
            ) from e
