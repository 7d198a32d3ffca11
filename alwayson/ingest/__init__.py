"""
Data ingestion module.

Provides the async usage API client with rate limiting and retries.
"""

from alwayson.ingest.rate_limiter import SlidingWindowLimiter
from alwayson.ingest.usage_api import UsageAPIClient

__all__ = [
    "UsageAPIClient",
    "SlidingWindowLimiter",
]
