"""
Tests for request pacing and Retry-After handling.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from alwayson.ingest.base import parse_retry_after
from alwayson.ingest.rate_limiter import SlidingWindowLimiter


class FakeClock:
    """Monotonic clock that only moves when the limiter sleeps or a test advances it."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_limiter(clock: FakeClock, max_requests: int = 2) -> SlidingWindowLimiter:
    return SlidingWindowLimiter(max_requests, window=60.0, clock=clock.time, sleep=clock.sleep)


async def acquire_times(limiter: SlidingWindowLimiter, count: int) -> None:
    for _ in range(count):
        await limiter.acquire()


class TestSlidingWindowLimiter:
    """Tests for the per-minute request quota."""

    def test_quota_does_not_wait(self):
        clock = FakeClock()

        asyncio.run(acquire_times(make_limiter(clock), 2))

        assert clock.sleeps == []

    def test_waits_for_oldest_request_to_expire(self):
        clock = FakeClock()
        limiter = make_limiter(clock)

        asyncio.run(acquire_times(limiter, 2))
        clock.now = 10.0
        asyncio.run(acquire_times(limiter, 1))

        assert clock.sleeps == [50.0]
        assert clock.now == 60.0

    def test_expired_requests_free_the_quota(self):
        clock = FakeClock()
        limiter = make_limiter(clock)

        asyncio.run(acquire_times(limiter, 2))
        clock.now = 61.0
        asyncio.run(acquire_times(limiter, 2))

        assert clock.sleeps == []

    def test_site_calculations_share_quota(self):
        # Two requests per site: three sites on a quota of four must wait once
        clock = FakeClock()
        limiter = make_limiter(clock, max_requests=4)

        asyncio.run(acquire_times(limiter, 6))

        assert len(clock.sleeps) == 1

    def test_from_rpm(self):
        limiter = SlidingWindowLimiter.from_rpm(120)

        assert limiter.max_requests == 120
        assert limiter.window == 60.0

    @pytest.mark.parametrize("max_requests,window", [(0, 60.0), (5, 0.0)])
    def test_rejects_invalid_parameters(self, max_requests, window):
        with pytest.raises(ValueError):
            SlidingWindowLimiter(max_requests, window=window)


class TestParseRetryAfter:
    """Tests for both Retry-After header forms."""

    def test_delay_seconds(self):
        assert parse_retry_after("120") == 120

    def test_negative_delay_is_zero(self):
        assert parse_retry_after("-5") == 0

    def test_missing_header_uses_default(self):
        assert parse_retry_after(None) == 60
        assert parse_retry_after(None, default=5) == 5

    def test_unreadable_header_uses_default(self):
        assert parse_retry_after("soon") == 60

    def test_past_http_date(self):
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0

    def test_future_http_date(self):
        when = datetime.now(timezone.utc) + timedelta(seconds=90)

        assert 85 <= parse_retry_after(format_datetime(when, usegmt=True)) <= 91
