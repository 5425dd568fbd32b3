"""HTTP client for the Apify REST API (v2)."""
import base64
import json
from typing import Any

import httpx
import structlog

from socialscope.config import settings

logger = structlog.get_logger(__name__)

WEBHOOK_EVENT_TYPES = [
    "ACTOR.RUN.SUCCEEDED",
    "ACTOR.RUN.FAILED",
    "ACTOR.RUN.TIMED_OUT",
    "ACTOR.RUN.ABORTED",
]

# Apify fills {{eventType}} and {{resource}} (the run object) when calling back.
WEBHOOK_PAYLOAD_TEMPLATE = '{"event": {{eventType}}, "resource": {{resource}}}'


class ApifyClientError(Exception):
    pass


def encode_webhooks(request_url: str, secret: str | None = None) -> str:
    """Build the base64 ``webhooks`` query parameter for an ad-hoc run webhook."""
    webhook: dict[str, Any] = {
        "eventTypes": WEBHOOK_EVENT_TYPES,
        "requestUrl": request_url,
        "payloadTemplate": WEBHOOK_PAYLOAD_TEMPLATE,
    }
    if secret:
        webhook["headersTemplate"] = json.dumps({"X-Webhook-Secret": secret})
    return base64.b64encode(json.dumps([webhook]).encode()).decode()


class ApifyClient:
    """Thin HTTP wrapper around the Apify actor-run and dataset endpoints."""

    def __init__(
        self,
        base_url: str = settings.apify_api_url,
        api_token: str = settings.apify_api_token,
        timeout: float = settings.apify_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def start_actor_run(
        self,
        actor_id: str,
        run_input: dict[str, Any],
        *,
        webhook_url: str,
        webhook_secret: str | None = None,
    ) -> dict[str, Any]:
        """
        POST /acts/{actor_id}/runs → {"data": {"id": "...", "status": "READY", ...}}

        Returns the run object without waiting for it to finish.
        """
        params = {"webhooks": encode_webhooks(webhook_url, webhook_secret)}

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self._base_url}/acts/{actor_id}/runs",
                    params=params,
                    json=run_input,
                    headers=self._headers,
                )
                response.raise_for_status()
                run = response.json()["data"]
                logger.info(
                    "apify_run_started",
                    actor_id=actor_id,
                    run_id=run.get("id"),
                    status=run.get("status"),
                )
                return run
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "apify_run_request_failed",
                    actor_id=actor_id,
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise ApifyClientError(
                    f"Apify API error {exc.response.status_code}: {exc.response.text}"
                ) from exc
            except httpx.RequestError as exc:
                logger.error("apify_connection_failed", actor_id=actor_id, error=str(exc))
                raise ApifyClientError(f"Failed to reach Apify: {exc}") from exc
            except (KeyError, ValueError) as exc:
                raise ApifyClientError(f"Unexpected response from Apify: {exc}") from exc

    async def list_dataset_items(self, dataset_id: str) -> list[dict[str, Any]]:
        """
        GET /datasets/{dataset_id}/items → [ {...}, {...} ]

        The whole dataset is returned in one listing call.
        """
        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self._base_url}/datasets/{dataset_id}/items",
                    params={"format": "json", "clean": "true"},
                    headers=self._headers,
                )
                response.raise_for_status()
                items = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "apify_dataset_request_failed",
                    dataset_id=dataset_id,
                    status_code=exc.response.status_code,
                )
                raise ApifyClientError(
                    f"Failed to get dataset {dataset_id}: {exc.response.status_code}"
                ) from exc
            except httpx.RequestError as exc:
                raise ApifyClientError(f"Failed to reach Apify: {exc}") from exc
            except ValueError as exc:
                raise ApifyClientError(f"Dataset {dataset_id} returned invalid JSON") from exc

        if not isinstance(items, list):
            raise ApifyClientError("Unexpected dataset format from Apify")

        logger.info("apify_dataset_fetched", dataset_id=dataset_id, item_count=len(items))
        return items
