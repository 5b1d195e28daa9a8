"""Token-bucket rate limiting for outbound API calls."""

import asyncio
import threading
import time
from collections.abc import Callable

from ingredient_resolver.errors import ExternalApiUnavailable

MAX_REQUESTS_PER_SECOND = 10.0


class TokenBucketLimiter:
    """Continuously refilling token bucket, shared across threads.

    The configured hourly budget is clamped to ``MAX_REQUESTS_PER_SECOND``
    regardless of configuration.
    """

    def __init__(
        self,
        requests_per_hour: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if requests_per_hour <= 0:
            raise ValueError("requests_per_hour must be positive")
        self.rate_per_second = min(requests_per_hour / 3600.0, MAX_REQUESTS_PER_SECOND)
        self.capacity = max(1.0, self.rate_per_second)
        self._clock = clock
        self._tokens = self.capacity
        self._updated_at = clock()
        self._lock = threading.Lock()

    def try_acquire(self) -> float:
        """Take a token if available; return 0 or the seconds until one is."""
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._updated_at)
            self._tokens = min(self.capacity, self._tokens + elapsed * self.rate_per_second)
            self._updated_at = now
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return 0.0
            return (1.0 - self._tokens) / self.rate_per_second

    async def acquire(self, max_wait_seconds: float) -> None:
        """Wait for a token, raising when the wait would exceed the budget."""
        waited = 0.0
        while True:
            delay = self.try_acquire()
            if delay == 0.0:
                return
            if waited + delay > max_wait_seconds:
                raise ExternalApiUnavailable(
                    f"rate limit wait {delay:.2f}s exceeds {max_wait_seconds:.2f}s"
                )
            await asyncio.sleep(delay)
            waited += delay
