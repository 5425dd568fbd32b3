"""Azure Functions entry point for SocialScope."""
import json
import logging
from typing import Any
from uuid import UUID

import azure.functions as func
from sqlalchemy import text

from socialscope.api.main import ERROR_STATUS_CODES
from socialscope.api.schemas.apify_webhook import decode_webhook_body
from socialscope.application.use_cases.get_scrape_status import (
    GetScrapeStatus,
    GetScrapeStatusInput,
)
from socialscope.application.use_cases.handle_scrape_webhook import (
    HandleScrapeWebhook,
    HandleScrapeWebhookInput,
    verify_webhook_secret,
)
from socialscope.application.use_cases.launch_scrape import LaunchScrape, LaunchScrapeInput
from socialscope.application.use_cases.materialize_scrape_results import MaterializeScrapeResults
from socialscope.config import settings
from socialscope.infrastructure.database.connection import AsyncSessionLocal
from socialscope.infrastructure.database.repositories.profile_data_repository import (
    SqlAlchemyProfileDataRepository,
)
from socialscope.infrastructure.database.repositories.profile_repository import (
    SqlAlchemyProfileRepository,
)
from socialscope.infrastructure.external_services.apify_client import ApifyClient
from socialscope.infrastructure.external_services.scrape_coordinator import ApifyScrapeCoordinator
from socialscope.infrastructure.logging.setup import configure_logging
from socialscope.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from socialscope.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher

configure_logging()

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def _json_response(body: dict[str, Any], status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),
        mimetype="application/json",
        status_code=status_code,
    )


def _error_response(exc: Exception) -> func.HttpResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    logging.warning(f"Request failed with {status_code}: {exc}")
    return _json_response({"error": str(exc)}, status_code=status_code)


def _event_publisher():
    if settings.event_publishing_enabled:
        return RabbitMQPublisher()
    return NoOpEventPublisher()


def _coordinator() -> ApifyScrapeCoordinator:
    return ApifyScrapeCoordinator(ApifyClient())


# ============================================================================
# Health Check
# ============================================================================

@app.route(route="health", methods=["GET"])
async def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    db_status = "connected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {exc}"

    overall = "healthy" if db_status == "connected" else "degraded"
    return _json_response({"status": overall, "database": db_status})


# ============================================================================
# Scrape launch and status
# ============================================================================

@app.route(route="api/scrape", methods=["POST"])
async def launch_scrape(req: func.HttpRequest) -> func.HttpResponse:
    """
    Start an Apify run for a profile owned by the X-User-Id caller.

    Request body:
    {
        "platform": "instagram",
        "handle": "@someone",
        "profileId": "<uuid>"
    }
    """
    user_id = req.headers.get("X-User-Id")
    if not user_id:
        return _json_response({"error": "Unauthorized"}, status_code=401)

    try:
        payload = req.get_json()
    except ValueError:
        return _json_response({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(payload, dict):
        return _json_response({"error": "Request body must be a JSON object"}, status_code=400)

    async with AsyncSessionLocal() as session:
        use_case = LaunchScrape(SqlAlchemyProfileRepository(session), _coordinator(), _event_publisher())
        try:
            result = await use_case.execute(
                LaunchScrapeInput(
                    platform=payload.get("platform"),
                    handle=payload.get("handle") or payload.get("username"),
                    profile_id=payload.get("profileId"),
                    user_id=user_id,
                )
            )
            await session.commit()
        except Exception as exc:
            await session.rollback()
            return _error_response(exc)

    logging.info(f"Scrape launched for {result.profile_id}: run {result.run_id}")
    return _json_response(
        {
            "success": True,
            "profileId": str(result.profile_id),
            "handle": result.handle,
            "platform": result.platform.value,
            "status": result.status.value,
            "runId": result.run_id,
        }
    )


@app.route(route="api/scrape", methods=["GET"])
async def get_scrape_status(req: func.HttpRequest) -> func.HttpResponse:
    """Point-in-time status of a profile's scrape for its owner."""
    user_id = req.headers.get("X-User-Id")
    if not user_id:
        return _json_response({"error": "Unauthorized"}, status_code=401)

    try:
        profile_id = UUID(req.params.get("profileId", ""))
    except ValueError:
        return _json_response({"error": "Profile ID is required"}, status_code=400)

    async with AsyncSessionLocal() as session:
        try:
            result = await GetScrapeStatus(SqlAlchemyProfileRepository(session)).execute(
                GetScrapeStatusInput(profile_id=profile_id, user_id=user_id)
            )
        except Exception as exc:
            return _error_response(exc)

    return _json_response(
        {
            "success": True,
            "profile": {
                "id": str(result.profile_id),
                "scrape_status": result.scrape_status.value,
                "scrape_error": result.scrape_error,
                "last_scraped": result.last_scraped.isoformat() if result.last_scraped else None,
                "stage": result.stage,
                "progress": result.progress,
            },
        }
    )


# ============================================================================
# Apify webhook
# ============================================================================

@app.route(route="api/webhooks/apify", methods=["POST"])
async def apify_webhook(req: func.HttpRequest) -> func.HttpResponse:
    """Called by Apify when a run reaches a terminal status."""
    try:
        profile_id = UUID(req.params.get("profileId", ""))
    except ValueError:
        return _json_response({"error": "Profile ID is required"}, status_code=400)

    generation_param = req.params.get("generation")
    try:
        generation = int(generation_param) if generation_param is not None else None
    except ValueError:
        return _json_response({"error": f"Invalid generation: {generation_param}"}, status_code=400)

    try:
        verify_webhook_secret(settings.webhook_secret, req.headers.get("X-Webhook-Secret"))
        payload = decode_webhook_body(req.get_body())
    except Exception as exc:
        return _error_response(exc)

    async with AsyncSessionLocal() as session:
        publisher = _event_publisher()
        profile_repo = SqlAlchemyProfileRepository(session)
        materializer = MaterializeScrapeResults(
            profile_repo,
            SqlAlchemyProfileDataRepository(session),
            _coordinator(),
            publisher,
        )
        use_case = HandleScrapeWebhook(profile_repo, materializer, publisher)
        try:
            result = await use_case.execute(
                HandleScrapeWebhookInput(profile_id=profile_id, outcome=payload.to_outcome(), generation=generation)
            )
            await session.commit()
        except Exception as exc:
            await session.rollback()
            return _error_response(exc)

    logging.info(f"Webhook for {profile_id} handled: {result.message}")
    return _json_response({"success": True, "message": result.message})
