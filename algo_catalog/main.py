import logging
import sys

import uvicorn
from fastapi import FastAPI

from algo_catalog.core.app_factory import create_app
from algo_catalog.core.config import settings
from algo_catalog.core.container import build_container
from algo_catalog.core.errors import StorageAppError
from algo_catalog.core.logging import configure_logging

configure_logging(settings.log)

logger = logging.getLogger(__name__)


def create_asgi_app() -> FastAPI:
    """App factory for ``uvicorn algo_catalog.main:create_asgi_app --factory``.

    The store is loaded during lifespan startup.
    """
    return create_app(settings)


def main() -> None:
    """Load the catalog, then serve it. Exits with status 1 if no state can be loaded."""
    container = build_container(settings)
    try:
        container.store.bootstrap(settings.app.seed_file, reseed=settings.app.reseed)
    except StorageAppError as exc:
        logger.critical(
            "store.bootstrap_failed",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
        sys.exit(1)

    server_app = create_app(settings, container=container, bootstrap=False)
    logger.info("server.starting", extra={"host": settings.app.host, "port": settings.app.port})
    uvicorn.run(
        server_app,
        host=settings.app.host,
        port=settings.app.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
