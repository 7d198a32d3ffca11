"""
Request pacing for the usage API.

The API quota is stated as requests per minute. Every site calculation
makes two sequential requests (site details, then usages) and the
runner walks sites one after another, so the limiter only has to keep
the count of requests started in the trailing minute under the quota.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque


logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class SlidingWindowLimiter:
    """
    Allows at most `max_requests` request starts in any `window` seconds.

    Start times are kept in a deque; once it is full, acquire() waits
    until the oldest start leaves the window. Calls are serialised with
    an asyncio.Lock so concurrent sites share one quota.
    """

    def __init__(
        self,
        max_requests: int,
        window: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {max_requests}")
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")

        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._sleep = sleep
        self._starts: Deque[float] = deque()
        self._lock = asyncio.Lock()

    @classmethod
    def from_rpm(cls, requests_per_minute: int, **kwargs) -> "SlidingWindowLimiter":
        return cls(max_requests=requests_per_minute, window=WINDOW_SECONDS, **kwargs)

    def _expire(self, now: float) -> None:
        while self._starts and now - self._starts[0] >= self.window:
            self._starts.popleft()

    async def acquire(self) -> None:
        """Wait until one more request fits in the window, then record it."""
        async with self._lock:
            now = self._clock()
            self._expire(now)
            while len(self._starts) >= self.max_requests:
                wait = self._starts[0] + self.window - now
                logger.debug(f"Request quota of {self.max_requests} reached, waiting {wait:.2f}s")
                await self._sleep(wait)
                now = self._clock()
                self._expire(now)
            self._starts.append(now)
