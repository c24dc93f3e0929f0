"""Public, read-only catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.schemas.catalog import CatalogEntry
from algo_catalog.services.catalog_service import CatalogFilter

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get(
    "/algorithms",
    response_model=list[CatalogEntry],
    response_model_exclude_none=True,
)
def list_algorithms(
    category: str | None = Query(None, description="Exact category match."),
    tag: str | None = Query(None, description="Entry must carry this tag."),
    search: str | None = Query(
        None, description="Case-insensitive substring of name, description or any tag."
    ),
    difficulty: str | None = Query(None, description="Exact difficulty match."),
    container: AppContainer = Depends(get_container),
) -> list[CatalogEntry]:
    """List approved algorithms matching every given filter."""
    filters = CatalogFilter(category=category, tag=tag, search=search, difficulty=difficulty)
    return container.catalog.list_algorithms(filters)


@router.get(
    "/algorithms/{algorithm_id}",
    response_model=CatalogEntry,
    response_model_exclude_none=True,
)
def get_algorithm(
    algorithm_id: str,
    container: AppContainer = Depends(get_container),
) -> CatalogEntry:
    """Fetch one approved algorithm by id; 404 when unknown or unapproved."""
    return container.catalog.get_algorithm(algorithm_id)


@router.get("/categories", response_model=list[str])
def list_categories(container: AppContainer = Depends(get_container)) -> list[str]:
    return container.catalog.categories()


@router.get("/tags", response_model=list[str])
def list_tags(container: AppContainer = Depends(get_container)) -> list[str]:
    return container.catalog.tags()
