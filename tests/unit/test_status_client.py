"""Unit tests for the HTTP status client used by the CLI."""
import json
from uuid import uuid4

import httpx
import pytest

from socialscope.client.status_client import ScrapeStatusClient, ScrapeStatusClientError
from socialscope.domain.enums.scrape_status import ScrapeStatus


def _client(handler) -> ScrapeStatusClient:
    return ScrapeStatusClient(
        "user-1", base_url="https://socialscope.test", transport=httpx.MockTransport(handler)
    )


class TestGetStatus:
    @pytest.mark.asyncio
    async def test_parses_profile_status(self) -> None:
        profile_id = uuid4()

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["X-User-Id"] == "user-1"
            assert request.url.params["profileId"] == str(profile_id)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "profile": {
                        "id": str(profile_id),
                        "scrape_status": "completed",
                        "scrape_error": None,
                        "last_scraped": "2026-10-19T12:00:00+00:00",
                        "stage": "Analysis complete",
                        "progress": 100,
                    },
                },
            )

        snapshot = await _client(handler).get_status(profile_id)

        assert snapshot.status == ScrapeStatus.COMPLETED
        assert snapshot.last_scraped.year == 2026

    @pytest.mark.asyncio
    async def test_error_body_is_surfaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "Profile x not found."})

        with pytest.raises(ScrapeStatusClientError, match="Profile x not found."):
            await _client(handler).get_status(uuid4())

    @pytest.mark.asyncio
    async def test_fetcher_reads_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"profile": {"scrape_status": "fetching", "scrape_error": None}}
            )

        fetch = _client(handler).fetcher(uuid4())
        snapshot = await fetch()
        assert snapshot.status == ScrapeStatus.FETCHING
        assert snapshot.last_scraped is None


class TestLaunch:
    @pytest.mark.asyncio
    async def test_posts_launch_request(self) -> None:
        profile_id = uuid4()

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/scrape"
            body = json.loads(request.content)
            assert body == {"platform": "instagram", "handle": "@x", "profileId": str(profile_id)}
            return httpx.Response(200, json={"success": True, "runId": "run-1", "handle": "x"})

        result = await _client(handler).launch(platform="instagram", handle="@x", profile_id=profile_id)
        assert result["runId"] == "run-1"

    @pytest.mark.asyncio
    async def test_launch_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, json={"error": "Apify API error 403: forbidden"})

        with pytest.raises(ScrapeStatusClientError, match="403"):
            await _client(handler).launch(platform="instagram", handle="x", profile_id=uuid4())
