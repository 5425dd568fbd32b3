from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Header, Query, Request

from socialscope.api.dependencies import get_handle_webhook_use_case
from socialscope.api.schemas.apify_webhook import decode_webhook_body
from socialscope.api.schemas.scrape import WebhookAcceptedResponse
from socialscope.application.use_cases.handle_scrape_webhook import (
    HandleScrapeWebhook,
    HandleScrapeWebhookInput,
    verify_webhook_secret,
)
from socialscope.config import settings

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/apify", response_model=WebhookAcceptedResponse)
async def apify_run_finished(
    request: Request,
    profile_id: UUID = Query(alias="profileId"),
    generation: int | None = Query(default=None, ge=0),
    x_webhook_secret: str | None = Header(default=None),
    use_case: HandleScrapeWebhook = Depends(get_handle_webhook_use_case),
) -> WebhookAcceptedResponse:
    """Called by Apify when a run reaches a terminal status.

    The body is validated here rather than by FastAPI so that a malformed
    payload is answered with 400 before any state is touched.
    """
    verify_webhook_secret(settings.webhook_secret, x_webhook_secret)

    body = await request.body()
    payload = decode_webhook_body(body)

    result = await use_case.execute(
        HandleScrapeWebhookInput(profile_id=profile_id, outcome=payload.to_outcome(), generation=generation)
    )
    logger.info(
        "scrape_webhook_handled",
        profile_id=str(profile_id),
        status=result.status.value,
        ignored=result.ignored,
    )
    return WebhookAcceptedResponse(message=result.message)
