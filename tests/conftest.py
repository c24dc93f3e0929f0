"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any ``algo_catalog`` import so the global
settings object never picks up a developer's .env file. Each test app gets its
own temp data directory, fake clock and container.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("ADMIN_USER", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-pass")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import re
from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from algo_catalog.core.app_factory import create_app
from algo_catalog.core.config import (
    AdminSettings,
    AppSettings,
    LogSettings,
    RateLimitSettings,
    Settings,
)
from algo_catalog.core.container import AppContainer, build_container
from algo_catalog.schemas.catalog import CatalogEntry, Complexity

ADMIN_AUTH = ("admin", "test-admin-pass")

_QUESTION = re.compile(r"What is (\d+) \+ (\d+)\?")


class FakeClock:
    """Deterministic epoch-seconds clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def solve_captcha(question: str) -> int:
    match = _QUESTION.fullmatch(question)
    assert match, question
    return int(match.group(1)) + int(match.group(2))


def make_entry(name: str = "Foo Bar!", **overrides) -> CatalogEntry:
    fields = {
        "name": name,
        "category": "Graph",
        "difficulty": "Beginner",
        "description": "A test algorithm.",
        "tags": ["test"],
        "pseudo_code": "do the thing",
        "complexity": Complexity(time="O(1)", space="O(1)"),
    }
    fields.update(overrides)
    return CatalogEntry(**fields)


def make_settings(tmp_path: Path, **rate_limit_overrides) -> Settings:
    rate_limit = {
        "submit_requests": 5,
        "submit_window_seconds": 60,
        "admin_requests": 10,
        "admin_window_seconds": 60,
        "api_requests": 1000,
        "api_window_seconds": 60,
    }
    rate_limit.update(rate_limit_overrides)
    return Settings(
        log=LogSettings(level="WARNING"),
        app=AppSettings(
            data_dir=str(tmp_path / "data"),
            static_dir=str(tmp_path / "static"),
        ),
        rate_limit=RateLimitSettings(**rate_limit),
        admin=AdminSettings(user=ADMIN_AUTH[0], password=ADMIN_AUTH[1]),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def container(test_settings: Settings, clock: FakeClock) -> AppContainer:
    return build_container(test_settings, clock=clock)


@pytest.fixture
def app(test_settings: Settings, container: AppContainer) -> FastAPI:
    return create_app(test_settings, container=container)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client with lifespan run, so the store is seeded from the bundled data."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def submit_payload(client: TestClient):
    """Build a submit body with a freshly solved captcha."""

    def _build(name: str = "Foo Bar!", **algorithm_overrides) -> dict:
        captcha = client.get("/api/captcha").json()
        algorithm = {
            "name": name,
            "category": "Graph",
            "difficulty": "Beginner",
            "description": "A community submitted algorithm.",
            "tags": ["community"],
            "pseudoCode": "step 1\nstep 2",
            "complexity": {"time": "O(n)", "space": "O(1)"},
        }
        algorithm.update(algorithm_overrides)
        return {
            "captchaId": captcha["id"],
            "captchaAnswer": solve_captcha(captcha["question"]),
            "submittedBy": "tester",
            "algorithm": algorithm,
        }

    return _build
