"""HTTP middleware: request correlation, access logging, security headers.

Usage:
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(access_log_middleware)
    app.middleware("http")(request_id_middleware)

Middleware registered last runs first, so the request id is set before the
access log line is written.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from algo_catalog.core.logging import clear_request_id, set_request_id
from algo_catalog.core.rate_limit import get_client_ip

logger = logging.getLogger("algo_catalog.access")

MAX_USER_AGENT_CHARS = 100

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data:; font-src 'self'"
    ),
}


def truncate_user_agent(user_agent: str) -> str:
    if len(user_agent) > MAX_USER_AGENT_CHARS:
        return user_agent[:MAX_USER_AGENT_CHARS] + "..."
    return user_agent


async def request_id_middleware(request: Request, call_next) -> Response:
    """Accept or generate a correlation id and echo it on the response.

    The id is kept in a context variable for the duration of the request so
    every log line emitted while handling it carries the same ``request_id``.
    Also reports total handling time in ``X-Request-Duration-ms``.
    """

    header_name = request.app.state.container.settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def access_log_middleware(request: Request, call_next) -> Response:
    """One log line per request with client IP, status and duration."""

    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    extra = {
        "client_ip": get_client_ip(request),
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": round(duration_ms, 2),
        "user_agent": truncate_user_agent(request.headers.get("User-Agent", "")),
    }
    cf_ray = request.headers.get("CF-Ray")
    if cf_ray:
        extra["cf_ray"] = cf_ray

    logger.info("http.request", extra=extra)
    return response


async def security_headers_middleware(request: Request, call_next) -> Response:
    response: Response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
