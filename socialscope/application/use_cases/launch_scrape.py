from dataclasses import dataclass
from uuid import UUID

import httpx
import structlog

from socialscope.application.errors import (
    ProfileNotFoundError,
    ScrapeLaunchError,
    ScrapeValidationError,
)
from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.interfaces.scrape_coordinator import ScrapeCoordinatorInterface
from socialscope.config import settings
from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.domain.handles import InvalidHandleError, normalize_handle

logger = structlog.get_logger(__name__)


def build_webhook_url(base_url: str, profile_id: UUID, generation: int) -> str:
    """Route the callback back to this profile and launch without a reverse lookup."""
    url = httpx.URL(base_url).copy_merge_params(
        {"profileId": str(profile_id), "generation": str(generation)}
    )
    return str(url)


@dataclass
class LaunchScrapeInput:
    platform: str | None
    handle: str | None
    profile_id: str | UUID | None
    user_id: str


@dataclass
class LaunchScrapeOutput:
    profile_id: UUID
    handle: str
    platform: Platform
    status: ScrapeStatus
    run_id: str
    generation: int


class LaunchScrape:
    """
    Use case: start one Apify actor run for an existing profile.

    The profile is committed as PENDING before Apify is contacted so status
    readers see the launch immediately. A refused launch leaves the profile
    FAILED with the provider's error text; nothing is retried.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        coordinator: ScrapeCoordinatorInterface,
        event_publisher: EventPublisher,
        webhook_base_url: str = settings.webhook_base_url,
    ) -> None:
        self._profile_repo = profile_repo
        self._coordinator = coordinator
        self._event_publisher = event_publisher
        self._webhook_base_url = webhook_base_url

    async def execute(self, input_data: LaunchScrapeInput) -> LaunchScrapeOutput:
        platform, profile_id = self._validate(input_data)

        profile = await self._profile_repo.get_by_id(profile_id)
        # Another user's profile is reported as missing.
        if profile is None or profile.user_id != input_data.user_id:
            raise ProfileNotFoundError(profile_id)
        if profile.platform is not platform:
            raise ScrapeValidationError(
                f"Profile {profile_id} is a {profile.platform.value} profile, not {platform.value}"
            )

        try:
            handle = normalize_handle(platform, input_data.handle or "")
        except InvalidHandleError as exc:
            raise ScrapeValidationError(str(exc)) from exc

        generation = profile.begin_scrape()
        await self._profile_repo.save(profile)
        await self._profile_repo.commit()
        await self._event_publisher.publish_many(profile.collect_events())

        webhook_url = build_webhook_url(self._webhook_base_url, profile.id, generation)

        try:
            run = await self._coordinator.start_profile_scrape(
                platform=platform, handle=handle, webhook_url=webhook_url
            )
        except Exception as exc:
            logger.exception(
                "scrape_launch_failed",
                profile_id=str(profile.id),
                platform=platform.value,
            )
            profile.mark_failed(str(exc))
            await self._profile_repo.save(profile)
            await self._profile_repo.commit()
            await self._event_publisher.publish_many(profile.collect_events())
            raise ScrapeLaunchError(str(exc)) from exc

        profile.record_run_started(run.run_id)
        if await self._profile_repo.save_run_started(profile):
            await self._event_publisher.publish_many(profile.collect_events())
        else:
            # The run's callback, or a newer launch, got there before Apify answered.
            profile.collect_events()
            current = await self._profile_repo.get_by_id(profile.id)
            if current is None:
                raise ProfileNotFoundError(profile.id)
            profile = current
            logger.info(
                "scrape_callback_preceded_launch",
                profile_id=str(profile.id),
                run_id=run.run_id,
                status=profile.scrape_status.value,
            )

        logger.info(
            "scrape_launched",
            profile_id=str(profile.id),
            platform=platform.value,
            handle=handle,
            run_id=run.run_id,
            generation=generation,
        )

        return LaunchScrapeOutput(
            profile_id=profile.id,
            handle=handle,
            platform=platform,
            status=profile.scrape_status,
            run_id=run.run_id,
            generation=generation,
        )

    @staticmethod
    def _validate(input_data: LaunchScrapeInput) -> tuple[Platform, UUID]:
        if not input_data.platform or not input_data.handle or not input_data.profile_id:
            raise ScrapeValidationError("Missing required fields")

        try:
            platform = Platform(str(input_data.platform).lower())
        except ValueError as exc:
            raise ScrapeValidationError(f"Unsupported platform: {input_data.platform}") from exc

        try:
            profile_id = (
                input_data.profile_id
                if isinstance(input_data.profile_id, UUID)
                else UUID(str(input_data.profile_id))
            )
        except ValueError as exc:
            raise ScrapeValidationError(f"Invalid profile id: {input_data.profile_id}") from exc

        return platform, profile_id
