from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialscope.application.errors import ProfileAlreadyExistsError
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.domain.entities.profile import Profile
from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.infrastructure.database.models import ProfileModel


def _to_domain(model: ProfileModel) -> Profile:
    return Profile(
        id=model.id,
        user_id=model.user_id,
        platform=Platform(model.platform),
        username=model.username,
        scrape_status=ScrapeStatus(model.scrape_status),
        scrape_error=model.scrape_error,
        last_scraped=model.last_scraped,
        apify_run_id=model.apify_run_id,
        scrape_generation=model.scrape_generation,
        created_at=model.created_at,
        updated_at=model.updated_at,
        status_changed_at=model.status_changed_at,
    )


def _to_model(profile: Profile) -> ProfileModel:
    return ProfileModel(
        id=profile.id,
        user_id=profile.user_id,
        platform=profile.platform,
        username=profile.username,
        scrape_status=profile.scrape_status,
        scrape_error=profile.scrape_error,
        last_scraped=profile.last_scraped,
        apify_run_id=profile.apify_run_id,
        scrape_generation=profile.scrape_generation,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        status_changed_at=profile.status_changed_at,
    )


class SqlAlchemyProfileRepository(ProfileRepository):
    """SQLAlchemy implementation for profile persistence.

    Writes are last-write-wins by id; there is no version column. Only the
    run-started write is conditional on the stored status.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, profile: Profile) -> None:
        model = await self._session.get(ProfileModel, profile.id)
        if model is None:
            try:
                async with self._session.begin_nested():
                    self._session.add(_to_model(profile))
            except IntegrityError as exc:
                raise ProfileAlreadyExistsError(
                    f"{profile.platform.value} profile {profile.username!r} already tracked"
                ) from exc
            return

        model.scrape_status = profile.scrape_status
        model.scrape_error = profile.scrape_error
        model.last_scraped = profile.last_scraped
        model.apify_run_id = profile.apify_run_id
        model.scrape_generation = profile.scrape_generation
        model.status_changed_at = profile.status_changed_at
        model.updated_at = profile.updated_at
        await self._session.flush()

    async def save_run_started(self, profile: Profile) -> bool:
        # Conditional so a callback committed while Apify was answering wins.
        result = await self._session.execute(
            update(ProfileModel)
            .where(
                ProfileModel.id == profile.id,
                ProfileModel.scrape_generation == profile.scrape_generation,
                ProfileModel.scrape_status == ScrapeStatus.PENDING,
            )
            .values(
                scrape_status=profile.scrape_status,
                scrape_error=profile.scrape_error,
                apify_run_id=profile.apify_run_id,
                status_changed_at=profile.status_changed_at,
                updated_at=profile.updated_at,
            )
            .returning(ProfileModel.id)
            .execution_options(synchronize_session="fetch")
        )
        return result.scalar_one_or_none() is not None

    async def get_by_id(self, profile_id: UUID) -> Profile | None:
        # Refreshed from the database: other sessions may have moved the status.
        model = await self._session.get(ProfileModel, profile_id, populate_existing=True)
        return _to_domain(model) if model is not None else None

    async def find_by_handle(
        self, *, user_id: str, platform: Platform, username: str
    ) -> Profile | None:
        result = await self._session.execute(
            select(ProfileModel).where(
                ProfileModel.user_id == user_id,
                ProfileModel.platform == platform,
                ProfileModel.username == username,
            )
        )
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    async def list_for_user(
        self, user_id: str, *, limit: int = 50, offset: int = 0
    ) -> tuple[list[Profile], int]:
        query = (
            select(ProfileModel)
            .where(ProfileModel.user_id == user_id)
            .order_by(
                ProfileModel.last_scraped.desc().nulls_last(),
                ProfileModel.created_at.desc(),
            )
            .limit(limit)
            .offset(offset)
        )
        count_query = (
            select(func.count()).select_from(ProfileModel).where(ProfileModel.user_id == user_id)
        )

        result = await self._session.execute(query)
        models = result.scalars().all()

        count_result = await self._session.execute(count_query)
        total = count_result.scalar_one()

        return [_to_domain(m) for m in models], total

    async def delete(self, profile_id: UUID) -> None:
        await self._session.execute(delete(ProfileModel).where(ProfileModel.id == profile_id))
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
