"""Rate limiting wiring for the HTTP layer.

Three independent limiters guard three surfaces:
- ``api``: every ``/api/*`` request (middleware, loose ceiling)
- ``submit``: ``POST /api/submit`` (dependency, tight)
- ``admin``: admin auth attempts (checked inside the auth dependency)

All of them key on the client IP, resolved through the usual reverse-proxy
headers before falling back to the socket peer.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Depends, Request, Response

from algo_catalog.adapters.rate_limit import AbstractRateLimiter
from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.core.errors import RateLimitAppError
from algo_catalog.core.exception_handlers import error_response

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty value wins.
CLIENT_IP_HEADERS = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Real-IP",
    "X-Forwarded-For",
)

UNKNOWN_CLIENT = "unknown"


def get_client_ip(request: Request) -> str:
    """Best-effort client IP, honouring proxy headers.

    ``X-Forwarded-For`` may carry a chain; the first (client) address is used.
    A header whose first address is blank is skipped. Never returns an empty
    string.
    """
    for header in CLIENT_IP_HEADERS:
        first = request.headers.get(header, "").split(",", 1)[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client IPs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def check_rate_limit(
    container: AppContainer,
    limiter: AbstractRateLimiter,
    request: Request,
    *,
    surface: str,
    message: str = "Rate limit exceeded. Please try again later.",
) -> None:
    """Consume one unit for the caller on ``limiter``.

    Raises:
        RateLimitAppError: When the caller is over budget.
    """
    cfg = container.settings.rate_limit
    if not cfg.enabled:
        return

    key = get_client_ip(request)
    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={"surface": surface, "key_hash": _hash_limiter_key(key), "remaining": result.remaining},
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "surface": surface,
            "key_hash": _hash_limiter_key(key),
            "limit": result.limit,
            "window_s": limiter.window_seconds,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if cfg.include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    raise RateLimitAppError(
        code="rate_limited",
        message=message,
        details={"retry_after": retry_after},
        headers=headers or None,
    )


def enforce_submit_rate_limit(
    request: Request,
    container: AppContainer = Depends(get_container),
) -> None:
    """FastAPI dependency guarding the public submission endpoint."""
    check_rate_limit(
        container,
        container.submit_limiter,
        request,
        surface="submit",
        message="Too many submissions. Please try again later.",
    )


async def api_rate_limit_middleware(request: Request, call_next) -> Response:
    """Apply the general API budget to every ``/api/*`` request.

    CORS preflights are not counted.
    """
    if request.url.path.startswith("/api/") and request.method != "OPTIONS":
        container: AppContainer = request.app.state.container
        try:
            check_rate_limit(container, container.api_limiter, request, surface="api")
        except RateLimitAppError as exc:
            return error_response(exc)
    return await call_next(request)
