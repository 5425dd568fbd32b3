from uuid import UUID

from fastapi import APIRouter, Depends, Query

from socialscope.api.dependencies import (
    get_current_user_id,
    get_launch_scrape_use_case,
    get_scrape_status_use_case,
)
from socialscope.api.schemas.scrape import (
    LaunchScrapeRequest,
    LaunchScrapeResponse,
    ScrapeStatusProfile,
    ScrapeStatusResponse,
)
from socialscope.application.use_cases.get_scrape_status import (
    GetScrapeStatus,
    GetScrapeStatusInput,
)
from socialscope.application.use_cases.launch_scrape import LaunchScrape, LaunchScrapeInput

router = APIRouter(prefix="/api/scrape", tags=["scrape"])


@router.post("", response_model=LaunchScrapeResponse)
async def launch_scrape(
    body: LaunchScrapeRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: LaunchScrape = Depends(get_launch_scrape_use_case),
) -> LaunchScrapeResponse:
    """Start an Apify run for a profile; the result arrives later by webhook."""
    result = await use_case.execute(
        LaunchScrapeInput(
            platform=body.platform,
            handle=body.handle,
            profile_id=body.profile_id,
            user_id=user_id,
        )
    )
    return LaunchScrapeResponse(
        profile_id=result.profile_id,
        handle=result.handle,
        platform=result.platform,
        status=result.status,
        run_id=result.run_id,
    )


@router.get("", response_model=ScrapeStatusResponse)
async def get_scrape_status(
    profile_id: UUID = Query(alias="profileId"),
    user_id: str = Depends(get_current_user_id),
    use_case: GetScrapeStatus = Depends(get_scrape_status_use_case),
) -> ScrapeStatusResponse:
    result = await use_case.execute(GetScrapeStatusInput(profile_id=profile_id, user_id=user_id))
    return ScrapeStatusResponse(
        profile=ScrapeStatusProfile(
            id=result.profile_id,
            scrape_status=result.scrape_status,
            scrape_error=result.scrape_error,
            last_scraped=result.last_scraped,
            stage=result.stage,
            progress=result.progress,
        )
    )
