"""Unit tests for the Apify HTTP client and the platform run parameters."""
import base64
import json

import httpx
import pytest

from socialscope.config import Settings
from socialscope.domain.enums.platform import Platform
from socialscope.infrastructure.external_services.apify_client import (
    WEBHOOK_EVENT_TYPES,
    ApifyClient,
    ApifyClientError,
    encode_webhooks,
)
from socialscope.infrastructure.external_services.scrape_coordinator import (
    ApifyScrapeCoordinator,
    actor_for,
    build_run_input,
)


def _client(handler) -> ApifyClient:
    return ApifyClient(
        base_url="https://apify.test/v2",
        api_token="token-123",
        transport=httpx.MockTransport(handler),
    )


def _decode_webhooks(value: str) -> list[dict]:
    return json.loads(base64.b64decode(value))


class TestEncodeWebhooks:
    def test_registers_all_terminal_events(self) -> None:
        [webhook] = _decode_webhooks(encode_webhooks("https://cb.test/hook?profileId=1"))
        assert webhook["eventTypes"] == WEBHOOK_EVENT_TYPES
        assert webhook["requestUrl"] == "https://cb.test/hook?profileId=1"
        assert "headersTemplate" not in webhook

    def test_secret_travels_as_header(self) -> None:
        [webhook] = _decode_webhooks(encode_webhooks("https://cb.test/hook", secret="s3cret"))
        assert json.loads(webhook["headersTemplate"]) == {"X-Webhook-Secret": "s3cret"}


class TestStartActorRun:
    @pytest.mark.asyncio
    async def test_posts_input_with_webhook(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(201, json={"data": {"id": "run-1", "status": "READY"}})

        run = await _client(handler).start_actor_run(
            "actor-1", {"username": ["sample_user"]}, webhook_url="https://cb.test/hook"
        )

        assert run == {"id": "run-1", "status": "READY"}
        request = captured["request"]
        assert request.method == "POST"
        assert request.url.path == "/v2/acts/actor-1/runs"
        assert request.headers["Authorization"] == "Bearer token-123"
        assert json.loads(request.content) == {"username": ["sample_user"]}
        [webhook] = _decode_webhooks(request.url.params["webhooks"])
        assert webhook["requestUrl"] == "https://cb.test/hook"

    @pytest.mark.asyncio
    async def test_provider_error_text_is_kept(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(402, text="Monthly usage limit exceeded")

        with pytest.raises(ApifyClientError, match="Apify API error 402: Monthly usage limit exceeded"):
            await _client(handler).start_actor_run("actor-1", {}, webhook_url="https://cb.test/hook")

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ApifyClientError, match="Failed to reach Apify"):
            await _client(handler).start_actor_run("actor-1", {}, webhook_url="https://cb.test/hook")


class TestListDatasetItems:
    @pytest.mark.asyncio
    async def test_returns_items_in_order(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v2/datasets/D1/items"
            assert request.url.params["clean"] == "true"
            return httpx.Response(200, json=[{"n": 1}, {"n": 2}])

        assert await _client(handler).list_dataset_items("D1") == [{"n": 1}, {"n": 2}]

    @pytest.mark.asyncio
    async def test_non_list_body_is_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": []})

        with pytest.raises(ApifyClientError, match="Unexpected dataset format"):
            await _client(handler).list_dataset_items("D1")

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "not found"})

        with pytest.raises(ApifyClientError, match="Failed to get dataset D1: 404"):
            await _client(handler).list_dataset_items("D1")


class TestRunParameters:
    def test_instagram_input(self) -> None:
        config = Settings(instagram_results_limit=25, instagram_session_cookie=None)
        run_input = build_run_input(Platform.INSTAGRAM, "sample_user", config)
        assert run_input["username"] == ["sample_user"]
        assert run_input["resultsLimit"] == 25
        assert "sessionCookie" not in run_input

    def test_instagram_session_cookie(self) -> None:
        config = Settings(instagram_session_cookie="sessionid=abc")
        assert build_run_input(Platform.INSTAGRAM, "u", config)["sessionCookie"] == "sessionid=abc"

    def test_linkedin_input(self) -> None:
        url = "https://www.linkedin.com/in/sample-user/"
        run_input = build_run_input(Platform.LINKEDIN, url, Settings(linkedin_posts_limit=10))
        assert run_input["profileUrls"] == [url]
        assert run_input["postsLimit"] == 10

    def test_actor_per_platform(self) -> None:
        config = Settings(apify_instagram_actor_id="ig", apify_linkedin_actor_id="li")
        assert actor_for(Platform.INSTAGRAM, config) == "ig"
        assert actor_for(Platform.LINKEDIN, config) == "li"


class TestApifyScrapeCoordinator:
    @pytest.mark.asyncio
    async def test_starts_platform_actor(self) -> None:
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(
                201, json={"data": {"id": "run-9", "status": "READY", "defaultDatasetId": "D9"}}
            )

        coordinator = ApifyScrapeCoordinator(
            _client(handler), Settings(apify_linkedin_actor_id="li-actor")
        )
        run = await coordinator.start_profile_scrape(
            platform=Platform.LINKEDIN,
            handle="https://www.linkedin.com/in/x/",
            webhook_url="https://cb.test/hook",
        )

        assert paths == ["/v2/acts/li-actor/runs"]
        assert run.run_id == "run-9"
        assert run.dataset_id == "D9"
