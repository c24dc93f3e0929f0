"""Request body size enforcement for JSON submissions."""
from __future__ import annotations

import logging

from fastapi import Request

from algo_catalog.core.errors import PayloadTooLargeAppError

logger = logging.getLogger(__name__)


def _too_large(max_bytes: int) -> PayloadTooLargeAppError:
    return PayloadTooLargeAppError(
        code="payload_too_large",
        message=f"Request body too large. Maximum size: {max_bytes} bytes",
        details={"max_value": max_bytes},
    )


async def read_body_limited(request: Request, max_bytes: int) -> bytes:
    """Read the request body in chunks, enforcing a size cap.

    Rejects early on a declared ``Content-Length`` above the cap, then keeps
    counting while streaming in case the header was absent or wrong.

    Args:
        request: Incoming request.
        max_bytes: Largest accepted body.

    Returns:
        The raw body bytes.

    Raises:
        PayloadTooLargeAppError: If the body exceeds ``max_bytes``.
    """
    declared = request.headers.get("Content-Length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        logger.warning(
            "body_limit.rejected_by_header",
            extra={"content_length": int(declared), "max_bytes": max_bytes},
        )
        raise _too_large(max_bytes)

    size = 0
    chunks: list[bytes] = []
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "body_limit.rejected_by_stream",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large(max_bytes)
        chunks.append(chunk)

    return b"".join(chunks)
