from dataclasses import dataclass
from uuid import UUID

import structlog

from socialscope.application.errors import ProfileNotFoundError
from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.interfaces.scrape_coordinator import ScrapeCoordinatorInterface
from socialscope.domain.entities.profile_data import EmptyDatasetError, ProfileData
from socialscope.domain.enums.scrape_status import ScrapeStatus

logger = structlog.get_logger(__name__)


@dataclass
class MaterializeScrapeResultsInput:
    profile_id: UUID
    dataset_id: str


@dataclass
class MaterializeScrapeResultsOutput:
    profile_id: UUID
    status: ScrapeStatus
    item_count: int
    error: str | None = None


class MaterializeScrapeResults:
    """
    Use case: pull a finished run's dataset and store it as the profile's snapshot.

    An empty dataset is a failure, never a completion. Any error while
    fetching or persisting is recorded verbatim on the profile.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        profile_data_repo: ProfileDataRepository,
        coordinator: ScrapeCoordinatorInterface,
        event_publisher: EventPublisher,
    ) -> None:
        self._profile_repo = profile_repo
        self._profile_data_repo = profile_data_repo
        self._coordinator = coordinator
        self._event_publisher = event_publisher

    async def execute(
        self, input_data: MaterializeScrapeResultsInput
    ) -> MaterializeScrapeResultsOutput:
        profile = await self._profile_repo.get_by_id(input_data.profile_id)
        if profile is None:
            raise ProfileNotFoundError(input_data.profile_id)

        try:
            items = await self._coordinator.fetch_results(input_data.dataset_id)
            snapshot = ProfileData.from_items(
                profile_id=profile.id,
                items=items,
                dataset_id=input_data.dataset_id,
            )
            await self._profile_data_repo.replace(snapshot)
            profile.mark_completed()
            await self._profile_repo.save(profile)
        except EmptyDatasetError as exc:
            logger.warning(
                "scrape_dataset_empty",
                profile_id=str(profile.id),
                dataset_id=input_data.dataset_id,
            )
            return await self._fail(profile.id, str(exc))
        except Exception as exc:
            logger.exception(
                "scrape_materialization_failed",
                profile_id=str(profile.id),
                dataset_id=input_data.dataset_id,
            )
            return await self._fail(profile.id, str(exc))

        await self._event_publisher.publish_many(profile.collect_events())

        logger.info(
            "scrape_results_stored",
            profile_id=str(profile.id),
            dataset_id=input_data.dataset_id,
            item_count=snapshot.item_count,
        )

        return MaterializeScrapeResultsOutput(
            profile_id=profile.id,
            status=profile.scrape_status,
            item_count=snapshot.item_count,
        )

    async def _fail(self, profile_id: UUID, reason: str) -> MaterializeScrapeResultsOutput:
        # A failed flush leaves the session unusable until it is rolled back.
        # SCRAPING was committed before materializing, so nothing else is lost.
        await self._profile_repo.rollback()
        profile = await self._profile_repo.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)

        profile.mark_failed(reason)
        await self._profile_repo.save(profile)
        await self._profile_repo.commit()
        await self._event_publisher.publish_many(profile.collect_events())
        return MaterializeScrapeResultsOutput(
            profile_id=profile.id,
            status=profile.scrape_status,
            item_count=0,
            error=reason,
        )
