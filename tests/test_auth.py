"""Tests for admin HTTP Basic authentication."""

import base64
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from algo_catalog.core.app_factory import create_app
from algo_catalog.core.auth import (
    credentials_match,
    parse_basic_credentials,
    require_admin,
    uses_default_password,
)
from algo_catalog.core.config import DEFAULT_ADMIN_PASSWORD, AdminSettings
from algo_catalog.core.container import build_container
from algo_catalog.core.errors import AuthenticationAppError
from tests.conftest import ADMIN_AUTH, FakeClock, make_settings


class TestCredentialsMatch:
    """Test the credential comparison helper."""

    def test_exact_match(self) -> None:
        admin = AdminSettings(user="root", password="s3cret")
        assert credentials_match("root", "s3cret", admin) is True

    @pytest.mark.parametrize(
        ("username", "password"),
        [("root", "wrong"), ("other", "s3cret"), ("", ""), ("root", "s3cret ")],
    )
    def test_mismatch(self, username: str, password: str) -> None:
        admin = AdminSettings(user="root", password="s3cret")
        assert credentials_match(username, password, admin) is False

    def test_default_password_detection(self) -> None:
        assert uses_default_password(AdminSettings(password=DEFAULT_ADMIN_PASSWORD)) is True
        assert uses_default_password(AdminSettings(password="strong")) is False


class TestAdminEndpoints:
    """Admin routes reject anything but the configured credentials."""

    def test_missing_credentials_is_401_with_challenge(self, client: TestClient) -> None:
        response = client.get("/api/admin/submissions")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="Admin"'
        assert response.json()["error"]["message"] == "Unauthorized"

    def test_wrong_password_is_401(self, client: TestClient) -> None:
        response = client.get("/api/admin/submissions", auth=("admin", "nope"))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="Admin"'

    @pytest.mark.parametrize("path", ["/api/admin/approve/x", "/api/admin/reject/x"])
    def test_mutations_require_auth(self, client: TestClient, path: str) -> None:
        assert client.post(path).status_code == 401

    def test_valid_credentials(self, client: TestClient) -> None:
        response = client.get("/api/admin/submissions", auth=ADMIN_AUTH)

        assert response.status_code == 200
        assert response.json() == []

    def test_attempts_are_rate_limited_even_when_correct(self, tmp_path: Path) -> None:
        cfg = make_settings(tmp_path, admin_requests=3)
        app = create_app(cfg, container=build_container(cfg, clock=FakeClock()))

        with TestClient(app) as client:
            for _ in range(3):
                client.get("/api/admin/submissions", auth=("admin", "guess"))
            blocked = client.get("/api/admin/submissions", auth=ADMIN_AUTH)

        assert blocked.status_code == 429
        assert blocked.json()["error"]["message"] == "Too many login attempts. Please try again later."


def _basic(raw: bytes) -> str:
    return "Basic " + base64.b64encode(raw).decode("ascii")


class TestParseBasicCredentials:
    def test_absent_or_other_scheme(self) -> None:
        assert parse_basic_credentials(None) is None
        assert parse_basic_credentials("") is None
        assert parse_basic_credentials("Bearer abc") is None

    def test_utf8_credentials(self) -> None:
        creds = parse_basic_credentials(_basic("admin:pässwort".encode("utf-8")))

        assert creds.username == "admin"
        assert creds.password == "pässwort"

    def test_password_may_contain_colons(self) -> None:
        assert parse_basic_credentials(_basic(b"admin:a:b")).password == "a:b"

    @pytest.mark.parametrize(
        "header",
        ["Basic !!!not-base64!!!", _basic(b"no-separator"), _basic(b"admin:\xff\xfe")],
    )
    def test_malformed_payload(self, header: str) -> None:
        with pytest.raises(AuthenticationAppError):
            parse_basic_credentials(header)


class TestNonAsciiAndMalformedHeaders:
    def test_non_ascii_password_can_log_in(self, tmp_path: Path) -> None:
        cfg = make_settings(tmp_path)
        cfg.admin = AdminSettings(user="admin", password="pässwort")
        app = create_app(cfg, container=build_container(cfg, clock=FakeClock()))

        with TestClient(app) as client:
            response = client.get(
                "/api/admin/submissions",
                headers={"Authorization": _basic("admin:pässwort".encode("utf-8"))},
            )

        assert response.status_code == 200
        assert response.json() == []

    def test_garbage_header_gets_error_envelope(self, client: TestClient) -> None:
        response = client.get("/api/admin/submissions", headers={"Authorization": "Basic %%%garbage"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="Admin"'
        assert response.json()["error"]["code"] == "unauthorized"

    def test_garbage_headers_are_rate_limited(self, tmp_path: Path) -> None:
        cfg = make_settings(tmp_path, admin_requests=2)
        app = create_app(cfg, container=build_container(cfg, clock=FakeClock()))
        headers = {"Authorization": "Basic %%%garbage"}

        with TestClient(app) as client:
            client.get("/api/admin/submissions", headers=headers)
            client.get("/api/admin/submissions", headers=headers)
            blocked = client.get("/api/admin/submissions", headers=headers)

        assert blocked.status_code == 429


class TestRequireAdminDependency:
    """Direct calls to the dependency, outside the HTTP stack."""

    @pytest.mark.asyncio
    async def test_returns_username(self, container) -> None:
        request = MagicMock()
        request.headers = {"Authorization": _basic(f"{ADMIN_AUTH[0]}:{ADMIN_AUTH[1]}".encode())}
        request.client.host = "10.0.0.1"

        assert await require_admin(request, container) == "admin"

    @pytest.mark.asyncio
    async def test_missing_credentials_raise(self, container) -> None:
        request = MagicMock()
        request.headers = {}
        request.client.host = "10.0.0.1"

        with pytest.raises(AuthenticationAppError):
            await require_admin(request, container)
