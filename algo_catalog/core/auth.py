"""HTTP Basic authentication for the moderation endpoints.

Admin credentials come from ``ADMIN_USER`` / ``ADMIN_PASSWORD``. Every attempt,
successful or not, first spends a unit of the admin rate limit budget so the
endpoint cannot be used to brute-force the password.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import secrets

from fastapi import Depends, Request
from fastapi.security import HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param

from algo_catalog.core.config import DEFAULT_ADMIN_PASSWORD, AdminSettings
from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.core.errors import AuthenticationAppError
from algo_catalog.core.rate_limit import check_rate_limit, get_client_ip

logger = logging.getLogger(__name__)


def _unauthorized() -> AuthenticationAppError:
    return AuthenticationAppError(code="unauthorized", message="Unauthorized")


def parse_basic_credentials(authorization: str | None) -> HTTPBasicCredentials | None:
    """Decode a ``Basic`` Authorization header.

    Credentials are decoded as UTF-8, so non-ASCII passwords work.

    Returns:
        None when the header is absent or uses another scheme.

    Raises:
        AuthenticationAppError: If the Basic payload cannot be decoded.
    """
    scheme, param = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(param, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise _unauthorized() from exc
    username, separator, password = decoded.partition(":")
    if not separator:
        raise _unauthorized()
    return HTTPBasicCredentials(username=username, password=password)


def _digest(value: str) -> bytes:
    return hashlib.sha256(value.encode("utf-8")).digest()


def credentials_match(username: str, password: str, admin: AdminSettings) -> bool:
    """Constant-time comparison of both credentials.

    Hashing first makes the comparison length-independent as well.
    """
    user_ok = secrets.compare_digest(_digest(username), _digest(admin.user))
    pass_ok = secrets.compare_digest(_digest(password), _digest(admin.password))
    return user_ok and pass_ok


def uses_default_password(admin: AdminSettings) -> bool:
    return admin.password == DEFAULT_ADMIN_PASSWORD


async def require_admin(
    request: Request,
    container: AppContainer = Depends(get_container),
) -> str:
    """FastAPI dependency guarding admin routes.

    The Authorization header is parsed here, after the admin budget is
    charged, so malformed headers are throttled and answered like any other
    failed login.

    Usage:
        @router.get("/admin/submissions", dependencies=[Depends(require_admin)])

    Returns:
        The authenticated admin username.

    Raises:
        RateLimitAppError: 429 when the caller exceeded the admin budget.
        AuthenticationAppError: 401 when credentials are missing, malformed or wrong.
    """
    check_rate_limit(
        container,
        container.admin_limiter,
        request,
        surface="admin",
        message="Too many login attempts. Please try again later.",
    )

    client_ip = get_client_ip(request)
    try:
        credentials = parse_basic_credentials(request.headers.get("Authorization"))
    except AuthenticationAppError:
        logger.warning("auth.malformed_credentials", extra={"client_ip": client_ip})
        raise

    if credentials is None:
        logger.warning("auth.missing_credentials", extra={"client_ip": client_ip})
        raise _unauthorized()

    if not credentials_match(credentials.username, credentials.password, container.settings.admin):
        logger.warning(
            "auth.failed",
            extra={
                "client_ip": client_ip,
                "username_hash": hashlib.sha256(credentials.username.encode()).hexdigest()[:16],
            },
        )
        raise _unauthorized()

    logger.info("auth.success", extra={"client_ip": client_ip})
    return credentials.username
