"""Application factory for the FastAPI app.

Centralizes app construction (container, lifespan, middleware, handlers,
routers) so tests can build isolated instances with their own settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from algo_catalog.api.routes import (
    admin_router,
    catalog_router,
    health_router,
    static_router,
    submissions_router,
)
from algo_catalog.core.auth import uses_default_password
from algo_catalog.core.config import LEGACY_ENV_APPLIED, Settings, settings
from algo_catalog.core.container import AppContainer, build_container
from algo_catalog.core.exception_handlers import setup_exception_handlers
from algo_catalog.core.middleware import (
    access_log_middleware,
    request_id_middleware,
    security_headers_middleware,
)
from algo_catalog.core.openapi import TAGS_METADATA, apply_openapi_customizations
from algo_catalog.core.rate_limit import api_rate_limit_middleware

logger = logging.getLogger(__name__)


def _build_lifespan(container: AppContainer, *, bootstrap: bool):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = container.settings
        if bootstrap:
            # StorageAppError here is fatal: there is no valid state to serve.
            container.store.bootstrap(cfg.app.seed_file, reseed=cfg.app.reseed)
        if uses_default_password(cfg.admin):
            logger.warning(
                "auth.default_password",
                extra={"hint": "Set ADMIN_PASSWORD for production"},
            )
        if LEGACY_ENV_APPLIED:
            logger.warning(
                "config.legacy_env_names",
                extra={"names": LEGACY_ENV_APPLIED, "hint": "Rename to the current variable names"},
            )
        container.start_background()
        logger.info(
            "app.started",
            extra={"data_file": str(container.store.data_file), "app_env": cfg.app_env},
        )
        try:
            yield
        finally:
            container.stop_background()
            logger.info("app.stopped")

    return lifespan


def create_app(
    cfg: Settings | None = None,
    *,
    container: AppContainer | None = None,
    bootstrap: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        cfg: Settings to use; defaults to the process-wide settings.
        container: Pre-built services (tests inject fakes/clocks here).
        bootstrap: Load or seed the store during startup.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = cfg or settings
    container = container or build_container(cfg)

    app = FastAPI(
        title="Algorithm Catalog API",
        description=(
            "Curated catalog of algorithm reference entries with filtering, "
            "captcha-gated public submissions and admin moderation."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        openapi_tags=TAGS_METADATA,
        lifespan=_build_lifespan(container, bootstrap=bootstrap),
    )
    app.state.container = container

    # Middleware (added last runs first); CORS wraps everything, 429s included
    app.middleware("http")(api_rate_limit_middleware)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(access_log_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.app.cors_origin],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(submissions_router)
    app.include_router(admin_router)
    app.include_router(static_router)

    apply_openapi_customizations(app)

    return app
