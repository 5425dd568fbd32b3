from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.domain.entities.profile_data import ProfileData
from socialscope.infrastructure.database.models import ProfileDataModel


def _to_domain(model: ProfileDataModel) -> ProfileData:
    return ProfileData(
        profile_id=model.profile_id,
        raw_data=list(model.raw_data),
        platform_specific_data=model.platform_specific_data,
        dataset_id=model.dataset_id,
        created_at=model.created_at,
    )


class SqlAlchemyProfileDataRepository(ProfileDataRepository):
    """SQLAlchemy-backed snapshot storage, one row per profile."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def replace(self, snapshot: ProfileData) -> None:
        # Delete and insert share one savepoint: a failed insert restores the old row.
        async with self._session.begin_nested():
            await self._session.execute(
                delete(ProfileDataModel).where(ProfileDataModel.profile_id == snapshot.profile_id)
            )
            self._session.add(
                ProfileDataModel(
                    profile_id=snapshot.profile_id,
                    raw_data=snapshot.raw_data,
                    platform_specific_data=snapshot.platform_specific_data,
                    dataset_id=snapshot.dataset_id,
                    item_count=snapshot.item_count,
                    created_at=snapshot.created_at,
                )
            )

    async def get_for_profile(self, profile_id: UUID) -> ProfileData | None:
        result = await self._session.execute(
            select(ProfileDataModel).where(ProfileDataModel.profile_id == profile_id)
        )
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    async def delete_for_profile(self, profile_id: UUID) -> None:
        await self._session.execute(
            delete(ProfileDataModel).where(ProfileDataModel.profile_id == profile_id)
        )
        await self._session.flush()
