import hmac
from dataclasses import dataclass
from uuid import UUID

import structlog

from socialscope.application.errors import (
    ProfileNotFoundError,
    WebhookAuthError,
)
from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.use_cases.materialize_scrape_results import (
    MaterializeScrapeResults,
    MaterializeScrapeResultsInput,
)
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.domain.outcomes.run_outcome import (
    RunOutcome,
    RunSucceeded,
)

logger = structlog.get_logger(__name__)

MISSING_DATASET_ERROR = "Scraping succeeded but no dataset id was provided (resource.defaultDatasetId)"


def verify_webhook_secret(expected: str | None, provided: str | None) -> None:
    """No-op when no secret is configured."""
    if not expected:
        return
    if provided is None or not hmac.compare_digest(expected, provided):
        raise WebhookAuthError("Invalid webhook secret")


@dataclass
class HandleScrapeWebhookInput:
    profile_id: UUID
    outcome: RunOutcome
    generation: int | None = None


@dataclass
class HandleScrapeWebhookOutput:
    profile_id: UUID
    status: ScrapeStatus
    message: str
    ignored: bool = False


class HandleScrapeWebhook:
    """
    Use case: apply an Apify run-completion callback to its profile.

    Every accepted callback ends with the profile COMPLETED or FAILED.
    Callbacks from a superseded launch (older generation) are acknowledged
    and dropped.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        materializer: MaterializeScrapeResults,
        event_publisher: EventPublisher,
    ) -> None:
        self._profile_repo = profile_repo
        self._materializer = materializer
        self._event_publisher = event_publisher

    async def execute(self, input_data: HandleScrapeWebhookInput) -> HandleScrapeWebhookOutput:
        profile = await self._profile_repo.get_by_id(input_data.profile_id)
        if profile is None:
            raise ProfileNotFoundError(input_data.profile_id)

        if profile.is_stale_generation(input_data.generation):
            logger.warning(
                "stale_webhook_ignored",
                profile_id=str(profile.id),
                generation=input_data.generation,
                current_generation=profile.scrape_generation,
            )
            return HandleScrapeWebhookOutput(
                profile_id=profile.id,
                status=profile.scrape_status,
                message="Ignored callback for a superseded scrape",
                ignored=True,
            )

        outcome = input_data.outcome
        logger.info(
            "scrape_webhook_received",
            profile_id=str(profile.id),
            outcome=type(outcome).__name__,
            generation=input_data.generation,
        )

        if isinstance(outcome, RunSucceeded) and outcome.dataset_id is not None:
            profile.mark_scraping()
            await self._profile_repo.save(profile)
            await self._profile_repo.commit()
            await self._event_publisher.publish_many(profile.collect_events())

            result = await self._materializer.execute(
                MaterializeScrapeResultsInput(
                    profile_id=profile.id, dataset_id=outcome.dataset_id
                )
            )
            if result.status is ScrapeStatus.COMPLETED:
                message = f"Stored {result.item_count} items"
            else:
                message = f"Scraping failed: {result.error}"
            return HandleScrapeWebhookOutput(
                profile_id=profile.id, status=result.status, message=message
            )

        # RunFailed and UnrecognizedOutcome both carry a reason.
        reason = MISSING_DATASET_ERROR if isinstance(outcome, RunSucceeded) else outcome.reason

        profile.mark_failed(reason)
        await self._profile_repo.save(profile)
        await self._event_publisher.publish_many(profile.collect_events())

        logger.info(
            "scrape_marked_failed",
            profile_id=str(profile.id),
            reason=reason,
        )

        return HandleScrapeWebhookOutput(
            profile_id=profile.id,
            status=profile.scrape_status,
            message=f"Profile marked as failed: {reason}",
        )
