"""In-memory sliding-log rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Each call rescans the key's log, so cost is O(requests in window).
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from algo_catalog.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class InMemorySlidingLogRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` requests per key in any trailing window.

    Every accepted request's timestamp is remembered. On each call the key's
    timestamps older than the window are discarded; the request is accepted
    (and recorded) only if fewer than ``limit`` remain. Rejected requests are
    not recorded.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of requests per trailing window.
            window_seconds: Length of the trailing window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, list[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _live(self, timestamps: list[float], now: float) -> list[float]:
        return [t for t in timestamps if now - t < self._window_seconds]

    def consume(self, key: str) -> RateLimitResult:
        """Check the key's trailing window and record the request if admitted.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        with self._lock:
            live = self._live(self._requests.get(key, []), now)

            if len(live) >= self._limit:
                self._requests[key] = live
                reset_at = live[0] + self._window_seconds
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
                )

            live.append(now)
            self._requests[key] = live
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(live),
                reset_at=int(math.ceil(live[0] + self._window_seconds)),
                retry_after_seconds=None,
            )

    def cleanup(self) -> int:
        now = self._clock()
        removed = 0
        with self._lock:
            for key in list(self._requests):
                live = self._live(self._requests[key], now)
                if live:
                    self._requests[key] = live
                else:
                    del self._requests[key]
                    removed += 1
        return removed

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._requests)
