from __future__ import annotations

from fastapi import APIRouter, Depends

from algo_catalog.core.container import AppContainer, get_container

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(container: AppContainer = Depends(get_container)) -> dict:
    """Liveness check for load balancers and monitoring.

    Returns:
        dict: ``status`` plus the number of published algorithms.
    """

    return {"status": "ok", "algorithms": len(container.store.list_approved())}
