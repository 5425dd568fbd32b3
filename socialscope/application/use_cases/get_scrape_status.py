from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from socialscope.application.errors import ProfileNotFoundError
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.progress import stage_for
from socialscope.domain.enums.scrape_status import ScrapeStatus


@dataclass
class GetScrapeStatusInput:
    profile_id: UUID
    user_id: str


@dataclass
class GetScrapeStatusOutput:
    profile_id: UUID
    scrape_status: ScrapeStatus
    scrape_error: str | None
    last_scraped: datetime | None
    stage: str
    progress: int


class GetScrapeStatus:
    """Use case: point-in-time read of a profile's scrape status for its owner."""

    def __init__(self, profile_repo: ProfileRepository) -> None:
        self._profile_repo = profile_repo

    async def execute(self, input_data: GetScrapeStatusInput) -> GetScrapeStatusOutput:
        profile = await self._profile_repo.get_by_id(input_data.profile_id)
        # Another user's profile is reported exactly like a missing one.
        if profile is None or profile.user_id != input_data.user_id:
            raise ProfileNotFoundError(input_data.profile_id)

        stage = stage_for(profile.scrape_status)
        return GetScrapeStatusOutput(
            profile_id=profile.id,
            scrape_status=profile.scrape_status,
            scrape_error=profile.scrape_error,
            last_scraped=profile.last_scraped,
            stage=stage.label,
            progress=stage.progress,
        )
