"""HTTP client for the scrape launch and status endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx
import structlog

from socialscope.client.status_poller import FetchStatus, StatusSnapshot
from socialscope.config import settings
from socialscope.domain.enums.scrape_status import ScrapeStatus

logger = structlog.get_logger(__name__)


class ScrapeStatusClientError(Exception):
    pass


def _error_text(response: httpx.Response) -> str:
    try:
        return str(response.json().get("error", response.text))
    except ValueError:
        return response.text


class ScrapeStatusClient:
    """Talks to a running SocialScope API on behalf of one user."""

    def __init__(
        self,
        user_id: str,
        base_url: str = settings.api_base_url,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {"X-User-Id": user_id}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def launch(self, *, platform: str, handle: str, profile_id: UUID | str) -> dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.post(
                    "/api/scrape",
                    json={"platform": platform, "handle": handle, "profileId": str(profile_id)},
                )
            except httpx.RequestError as exc:
                raise ScrapeStatusClientError(f"Failed to reach SocialScope: {exc}") from exc

        if response.is_error:
            raise ScrapeStatusClientError(_error_text(response))
        return response.json()

    async def get_status(self, profile_id: UUID | str) -> StatusSnapshot:
        async with self._client() as client:
            try:
                response = await client.get("/api/scrape", params={"profileId": str(profile_id)})
            except httpx.RequestError as exc:
                raise ScrapeStatusClientError(f"Failed to reach SocialScope: {exc}") from exc

        if response.is_error:
            raise ScrapeStatusClientError(_error_text(response))

        profile = response.json()["profile"]
        last_scraped = profile.get("last_scraped")
        return StatusSnapshot(
            status=ScrapeStatus(profile["scrape_status"]),
            error=profile.get("scrape_error"),
            last_scraped=datetime.fromisoformat(last_scraped) if last_scraped else None,
        )

    def fetcher(self, profile_id: UUID | str) -> FetchStatus:
        async def fetch() -> StatusSnapshot:
            return await self.get_status(profile_id)

        return fetch
