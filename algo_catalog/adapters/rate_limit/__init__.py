"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
an in-memory limiter and later migrate to Redis or another shared store
without changing the API layer.
"""

from algo_catalog.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from algo_catalog.adapters.rate_limit.in_memory import InMemorySlidingLogRateLimiter

__all__ = ["AbstractRateLimiter", "InMemorySlidingLogRateLimiter", "RateLimitResult"]
