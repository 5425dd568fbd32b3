from typing import Any

import structlog

from socialscope.application.interfaces.scrape_coordinator import (
    ScrapeCoordinatorInterface,
    ScrapeRunResult,
)
from socialscope.config import Settings, settings
from socialscope.domain.enums.platform import Platform
from socialscope.infrastructure.external_services.apify_client import ApifyClient

logger = structlog.get_logger(__name__)


def build_run_input(platform: Platform, handle: str, config: Settings = settings) -> dict[str, Any]:
    """Static per-platform actor parameters."""
    if platform is Platform.INSTAGRAM:
        run_input: dict[str, Any] = {
            "username": [handle],
            "resultsLimit": config.instagram_results_limit,
            "resultsType": ["posts", "reels", "stories", "highlights"],
            "scrapeFollowers": True,
            "scrapeFollowing": True,
            "expandOwners": True,
            "scrapeLikes": True,
            "scrapeComments": True,
            "commentsLimit": config.instagram_comments_limit,
        }
        if config.instagram_session_cookie:
            run_input["sessionCookie"] = config.instagram_session_cookie
        return run_input

    return {
        "profileUrls": [handle],
        "includePostsData": True,
        "postsLimit": config.linkedin_posts_limit,
        "includeActivityData": True,
        "includeEducationData": True,
        "includeExperienceData": True,
        "includeSkillsData": True,
        "includeRecommendationsData": True,
        "proxy": {"useApifyProxy": True},
    }


def actor_for(platform: Platform, config: Settings = settings) -> str:
    if platform is Platform.INSTAGRAM:
        return config.apify_instagram_actor_id
    return config.apify_linkedin_actor_id


class ApifyScrapeCoordinator(ScrapeCoordinatorInterface):
    """Drives the platform actors on Apify."""

    def __init__(self, client: ApifyClient, config: Settings = settings) -> None:
        self._client = client
        self._config = config

    async def start_profile_scrape(
        self, *, platform: Platform, handle: str, webhook_url: str
    ) -> ScrapeRunResult:
        actor_id = actor_for(platform, self._config)
        logger.info("triggering_scrape", platform=platform.value, handle=handle, actor_id=actor_id)
        run = await self._client.start_actor_run(
            actor_id,
            build_run_input(platform, handle, self._config),
            webhook_url=webhook_url,
            webhook_secret=self._config.webhook_secret,
        )
        return ScrapeRunResult(
            run_id=run["id"],
            status=run.get("status", "READY"),
            dataset_id=run.get("defaultDatasetId"),
        )

    async def fetch_results(self, dataset_id: str) -> list[dict[str, Any]]:
        return await self._client.list_dataset_items(dataset_id)
