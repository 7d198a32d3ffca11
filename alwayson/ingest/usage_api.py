"""
Usage API client.

Fetches a site's timezone and its periodic (interval) usage.
Implements the UsageProvider interface used by AlwaysOnCalculator.
"""

import logging
from typing import Any

import httpx

from alwayson.core.config import Settings
from alwayson.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PERIOD,
    DEFAULT_RATE_LIMIT_RPM,
    DEFAULT_REQUEST_TIMEOUT,
)
from alwayson.core.exceptions import ConfigurationError, DataFetchError
from alwayson.ingest.base import BaseAPIClient
from alwayson.ingest.rate_limiter import SlidingWindowLimiter


logger = logging.getLogger(__name__)


class UsageAPIClient(BaseAPIClient):
    """
    Client for the site usage API.

    Endpoints:
    - Site metadata (timezone)
    - Periodic usage items
    """

    SOURCE_NAME = "usage_api"

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        rate_limit_rpm: int = DEFAULT_RATE_LIMIT_RPM,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize usage API client.

        Args:
            access_token: Bearer token for the API
            base_url: API base URL
            rate_limit_rpm: Requests per minute limit
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per request
            backoff_base: Seconds before the first retry
            transport: Optional httpx transport
        """
        if not access_token:
            raise ConfigurationError("access_token must be a non-empty string")

        self.access_token = access_token
        super().__init__(
            base_url=base_url,
            rate_limiter=SlidingWindowLimiter.from_rpm(rate_limit_rpm),
            timeout=timeout,
            max_retries=max_retries,
            backoff_base=backoff_base,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, access_token: str | None = None) -> "UsageAPIClient":
        """Build a client from application settings."""
        return cls(
            access_token=access_token or settings.access_token or "",
            base_url=settings.api_base_url,
            rate_limit_rpm=settings.rate_limit_rpm,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )

    def _auth_headers(self) -> dict[str, str]:
        """Bearer token auth."""
        return {"Authorization": f"Bearer {self.access_token}"}

    async def get_timezone(self, site_hash: str) -> str:
        """
        Fetch the IANA timezone of a site.

        Args:
            site_hash: Site identifier

        Returns:
            Timezone name, e.g. "Asia/Seoul"
        """
        data = await self._get(f"/sites/{site_hash}", site_hash=site_hash)

        timezone = data.get("timezone") if isinstance(data, dict) else None
        if not timezone:
            raise DataFetchError(
                "Site response has no timezone",
                source=self.SOURCE_NAME,
                site_hash=site_hash,
            )
        return timezone

    async def get_usages(
        self,
        site_hash: str,
        *,
        start: int,
        end: int,
        period: str = DEFAULT_PERIOD,
    ) -> dict[str, Any]:
        """
        Fetch periodic usage of a site.

        Args:
            site_hash: Site identifier
            start: Window start, epoch ms
            end: Window end, epoch ms
            period: Interval granularity, e.g. "15min"

        Returns:
            Response with an "items" list of {"timestamp", "usage"} dicts
        """
        data = await self._get(
            f"/sites/{site_hash}/usages/periodic",
            params={"period": period, "start": start, "end": end},
            site_hash=site_hash,
        )

        if not isinstance(data, dict):
            raise DataFetchError(
                "Usage response is not an object",
                source=self.SOURCE_NAME,
                site_hash=site_hash,
            )
        logger.debug(f"Fetched {len(data.get('items') or [])} usage items for {site_hash}")
        return data
