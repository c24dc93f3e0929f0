"""Moderation endpoints, all behind HTTP Basic Auth."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from algo_catalog.core.auth import require_admin
from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.schemas.catalog import ApproveResponse, MessageResponse, Submission

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get(
    "/submissions",
    response_model=list[Submission],
    response_model_exclude_none=True,
)
def list_pending_submissions(container: AppContainer = Depends(get_container)) -> list[Submission]:
    return container.store.list_pending()


@router.post("/approve/{submission_id}", response_model=ApproveResponse)
def approve_submission(
    submission_id: str,
    container: AppContainer = Depends(get_container),
) -> ApproveResponse:
    """Publish a pending submission.

    Responds 404 with code ``submission_not_found`` for unknown ids and
    ``submission_already_reviewed`` for submissions already acted on.
    """
    entry = container.store.approve(submission_id)
    return ApproveResponse(message="Submission approved", algorithm_id=entry.id)


@router.post("/reject/{submission_id}", response_model=MessageResponse)
def reject_submission(
    submission_id: str,
    container: AppContainer = Depends(get_container),
) -> MessageResponse:
    container.store.reject(submission_id)
    return MessageResponse(message="Submission rejected")
