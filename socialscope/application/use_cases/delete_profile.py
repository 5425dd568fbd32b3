from dataclasses import dataclass
from uuid import UUID

import structlog

from socialscope.application.errors import ProfileNotFoundError
from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.application.interfaces.profile_repository import ProfileRepository

logger = structlog.get_logger(__name__)


@dataclass
class DeleteProfileInput:
    profile_id: UUID
    user_id: str


class DeleteProfile:
    """
    Use case: user-initiated removal of a profile and its snapshot.

    A run still in flight may call back afterwards; that callback finds no
    profile and is rejected.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        profile_data_repo: ProfileDataRepository,
    ) -> None:
        self._profile_repo = profile_repo
        self._profile_data_repo = profile_data_repo

    async def execute(self, input_data: DeleteProfileInput) -> None:
        profile = await self._profile_repo.get_by_id(input_data.profile_id)
        if profile is None or profile.user_id != input_data.user_id:
            raise ProfileNotFoundError(input_data.profile_id)

        await self._profile_data_repo.delete_for_profile(profile.id)
        await self._profile_repo.delete(profile.id)

        logger.info("profile_deleted", profile_id=str(profile.id), user_id=input_data.user_id)
