from dataclasses import dataclass
from uuid import UUID

from socialscope.application.errors import ProfileNotFoundError
from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.domain.entities.profile import Profile
from socialscope.domain.entities.profile_data import ProfileData


@dataclass
class GetProfileDetailsInput:
    profile_id: UUID
    user_id: str


@dataclass
class GetProfileDetailsOutput:
    profile: Profile
    data: ProfileData | None


class GetProfileDetails:
    """Use case: a user's profile together with its latest committed snapshot."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        profile_data_repo: ProfileDataRepository,
    ) -> None:
        self._profile_repo = profile_repo
        self._profile_data_repo = profile_data_repo

    async def execute(self, input_data: GetProfileDetailsInput) -> GetProfileDetailsOutput:
        profile = await self._profile_repo.get_by_id(input_data.profile_id)
        if profile is None or profile.user_id != input_data.user_id:
            raise ProfileNotFoundError(input_data.profile_id)

        data = await self._profile_data_repo.get_for_profile(profile.id)
        return GetProfileDetailsOutput(profile=profile, data=data)
