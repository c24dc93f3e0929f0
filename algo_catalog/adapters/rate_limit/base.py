"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
storage backend can be swapped later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per trailing window.
        remaining: Requests still admissible right now (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted request leaves
            the window and a slot frees up.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` if it fits in the budget.

        Args:
            key: Unique caller identifier (client IP).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> int:
        """Drop expired state for every key.

        Returns:
            Number of keys removed entirely.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        raise NotImplementedError

    def allow(self, key: str) -> bool:
        return self.consume(key).allowed
