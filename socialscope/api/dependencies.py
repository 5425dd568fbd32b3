"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, so route handlers stay thin and tests can swap any
of them through ``app.dependency_overrides``.
"""
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.interfaces.scrape_coordinator import ScrapeCoordinatorInterface
from socialscope.application.use_cases.delete_profile import DeleteProfile
from socialscope.application.use_cases.get_profile_details import GetProfileDetails
from socialscope.application.use_cases.get_scrape_status import GetScrapeStatus
from socialscope.application.use_cases.handle_scrape_webhook import HandleScrapeWebhook
from socialscope.application.use_cases.launch_scrape import LaunchScrape
from socialscope.application.use_cases.materialize_scrape_results import MaterializeScrapeResults
from socialscope.application.use_cases.register_profile import RegisterProfile
from socialscope.config import settings
from socialscope.infrastructure.database.connection import get_db_session
from socialscope.infrastructure.database.repositories.profile_data_repository import (
    SqlAlchemyProfileDataRepository,
)
from socialscope.infrastructure.database.repositories.profile_repository import (
    SqlAlchemyProfileRepository,
)
from socialscope.infrastructure.external_services.apify_client import ApifyClient
from socialscope.infrastructure.external_services.scrape_coordinator import ApifyScrapeCoordinator
from socialscope.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from socialscope.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher


# ---- Low-level dependencies ------------------------------------------------

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def get_profile_repo(session: AsyncSession = Depends(get_session)) -> ProfileRepository:
    return SqlAlchemyProfileRepository(session)


def get_profile_data_repo(session: AsyncSession = Depends(get_session)) -> ProfileDataRepository:
    return SqlAlchemyProfileDataRepository(session)


def get_event_publisher() -> EventPublisher:
    if settings.event_publishing_enabled:
        return RabbitMQPublisher()
    return NoOpEventPublisher()


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """The owner id is asserted by the upstream auth layer in ``X-User-Id``."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id


# ---- External service coordinators ----------------------------------------

def get_scrape_coordinator() -> ScrapeCoordinatorInterface:
    return ApifyScrapeCoordinator(ApifyClient())


# ---- Use-case dependencies -------------------------------------------------

def get_launch_scrape_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    coordinator: ScrapeCoordinatorInterface = Depends(get_scrape_coordinator),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> LaunchScrape:
    return LaunchScrape(profile_repo, coordinator, event_publisher)


def get_materialize_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    profile_data_repo: ProfileDataRepository = Depends(get_profile_data_repo),
    coordinator: ScrapeCoordinatorInterface = Depends(get_scrape_coordinator),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> MaterializeScrapeResults:
    return MaterializeScrapeResults(profile_repo, profile_data_repo, coordinator, event_publisher)


def get_handle_webhook_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    materializer: MaterializeScrapeResults = Depends(get_materialize_use_case),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> HandleScrapeWebhook:
    return HandleScrapeWebhook(profile_repo, materializer, event_publisher)


def get_scrape_status_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
) -> GetScrapeStatus:
    return GetScrapeStatus(profile_repo)


def get_register_profile_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> RegisterProfile:
    return RegisterProfile(profile_repo, event_publisher)


def get_profile_details_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    profile_data_repo: ProfileDataRepository = Depends(get_profile_data_repo),
) -> GetProfileDetails:
    return GetProfileDetails(profile_repo, profile_data_repo)


def get_delete_profile_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    profile_data_repo: ProfileDataRepository = Depends(get_profile_data_repo),
) -> DeleteProfile:
    return DeleteProfile(profile_repo, profile_data_repo)
