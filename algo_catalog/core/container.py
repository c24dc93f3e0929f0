"""Explicit wiring of the long-lived service objects.

One container is built per app instance and hung on ``app.state``; route
dependencies pull what they need from it. Nothing here is module-global, so
tests can build as many isolated apps as they like.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request

from algo_catalog.adapters.rate_limit import AbstractRateLimiter, InMemorySlidingLogRateLimiter
from algo_catalog.adapters.storage import JsonFileCatalogStore
from algo_catalog.core.background import PeriodicSweeper
from algo_catalog.core.config import Settings
from algo_catalog.services.captcha_service import CaptchaStore
from algo_catalog.services.catalog_service import CatalogService, SubmissionLimits


@dataclass
class AppContainer:
    settings: Settings
    store: JsonFileCatalogStore
    catalog: CatalogService
    captchas: CaptchaStore
    submit_limiter: AbstractRateLimiter
    admin_limiter: AbstractRateLimiter
    api_limiter: AbstractRateLimiter
    sweepers: list[PeriodicSweeper] = field(default_factory=list)

    def start_background(self) -> None:
        for sweeper in self.sweepers:
            sweeper.start()

    def stop_background(self) -> None:
        for sweeper in self.sweepers:
            sweeper.stop()


def build_container(
    cfg: Settings,
    *,
    store: JsonFileCatalogStore | None = None,
    clock: Callable[[], float] = time.time,
) -> AppContainer:
    """Construct store, limiters and captcha store from settings.

    The store is created but not loaded; call ``store.bootstrap`` (done by
    the app lifespan) before serving traffic.
    """
    rl = cfg.rate_limit
    store = store or JsonFileCatalogStore(cfg.app.data_file)
    captchas = CaptchaStore(ttl_seconds=cfg.app.captcha_ttl_seconds, clock=clock)

    submit_limiter = InMemorySlidingLogRateLimiter(
        limit=rl.submit_requests, window_seconds=rl.submit_window_seconds, clock=clock
    )
    admin_limiter = InMemorySlidingLogRateLimiter(
        limit=rl.admin_requests, window_seconds=rl.admin_window_seconds, clock=clock
    )
    api_limiter = InMemorySlidingLogRateLimiter(
        limit=rl.api_requests, window_seconds=rl.api_window_seconds, clock=clock
    )

    sweepers = [
        PeriodicSweeper("captcha", cfg.app.captcha_sweep_seconds, captchas.sweep),
        PeriodicSweeper("rate-limit-submit", submit_limiter.window_seconds, submit_limiter.cleanup),
        PeriodicSweeper("rate-limit-admin", admin_limiter.window_seconds, admin_limiter.cleanup),
        PeriodicSweeper("rate-limit-api", api_limiter.window_seconds, api_limiter.cleanup),
    ]

    return AppContainer(
        settings=cfg,
        store=store,
        catalog=CatalogService(store, SubmissionLimits.from_settings(cfg.app)),
        captchas=captchas,
        submit_limiter=submit_limiter,
        admin_limiter=admin_limiter,
        api_limiter=api_limiter,
        sweepers=sweepers,
    )


def get_container(request: Request) -> AppContainer:
    """FastAPI dependency returning the app's container."""
    return request.app.state.container
