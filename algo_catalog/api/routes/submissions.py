"""Public submission workflow: captcha issue and captcha-gated submit."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from algo_catalog.core.body_limits import read_body_limited
from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.core.errors import ValidationAppError
from algo_catalog.core.rate_limit import enforce_submit_rate_limit, get_client_ip
from algo_catalog.schemas.catalog import CaptchaResponse, SubmitRequest, SubmitResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Submissions"])


@router.get("/captcha", response_model=CaptchaResponse)
def get_captcha(container: AppContainer = Depends(get_container)) -> CaptchaResponse:
    """Issue a one-time arithmetic challenge. The answer is never returned."""
    challenge = container.captchas.create()
    return CaptchaResponse(id=challenge.id, question=challenge.question)


@router.post(
    "/submit",
    response_model=SubmitResponse,
    dependencies=[Depends(enforce_submit_rate_limit)],
)
async def submit_algorithm(
    request: Request,
    container: AppContainer = Depends(get_container),
) -> SubmitResponse:
    """Propose a new algorithm for admin review.

    Body: ``{captchaId, captchaAnswer, submittedBy, algorithm: {...}}``.

    Raises:
        RateLimitAppError: 429 when the caller exceeded the submit budget.
        PayloadTooLargeAppError: 413 when the body is over the size cap.
        ValidationAppError: 400 for a malformed body, a failed captcha,
            missing required fields or oversize fields.
    """
    raw = await read_body_limited(request, container.settings.app.max_body_bytes)

    try:
        payload = SubmitRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise ValidationAppError(
            code="invalid_request_body",
            message="Invalid request body",
            details={"context": {"errors": exc.error_count()}},
        ) from exc

    if not container.captchas.validate(payload.captcha_id, payload.captcha_answer):
        raise ValidationAppError(code="invalid_captcha", message="Invalid or expired captcha")

    submission_id = await run_in_threadpool(
        container.catalog.submit, payload.algorithm, payload.submitted_by
    )

    logger.info(
        "submission.received",
        extra={"submission_id": submission_id, "client_ip": get_client_ip(request)},
    )
    return SubmitResponse(message="Algorithm submitted for review", submission_id=submission_id)
