from __future__ import annotations

from algo_catalog.api.routes.admin import router as admin_router
from algo_catalog.api.routes.catalog import router as catalog_router
from algo_catalog.api.routes.health import router as health_router
from algo_catalog.api.routes.static import router as static_router
from algo_catalog.api.routes.submissions import router as submissions_router

__all__ = [
    "admin_router",
    "catalog_router",
    "health_router",
    "static_router",
    "submissions_router",
]
