"""Shared in-memory fakes for the repository and messaging ports."""
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from socialscope.application.errors import ProfileAlreadyExistsError
from socialscope.application.interfaces.profile_data_repository import ProfileDataRepository
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.domain.entities.profile import Profile
from socialscope.domain.entities.profile_data import ProfileData
from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self, *profiles: Profile) -> None:
        self.profiles: dict[UUID, Profile] = {p.id: p for p in profiles}
        self.commits = 0
        self.rollbacks = 0

    async def save(self, profile: Profile) -> None:
        for existing in self.profiles.values():
            if (
                existing.id != profile.id
                and (existing.user_id, existing.platform, existing.username)
                == (profile.user_id, profile.platform, profile.username)
            ):
                raise ProfileAlreadyExistsError(profile.username)
        # Stored as a copy so unsaved changes never leak into the "database".
        self.profiles[profile.id] = replace(profile, _events=[])

    async def save_run_started(self, profile: Profile) -> bool:
        stored = self.profiles.get(profile.id)
        if (
            stored is None
            or stored.scrape_status is not ScrapeStatus.PENDING
            or stored.scrape_generation != profile.scrape_generation
        ):
            return False
        self.profiles[profile.id] = replace(profile, _events=[])
        return True

    async def get_by_id(self, profile_id: UUID) -> Profile | None:
        stored = self.profiles.get(profile_id)
        return replace(stored, _events=[]) if stored else None

    async def find_by_handle(self, *, user_id: str, platform: Platform, username: str) -> Profile | None:
        for p in self.profiles.values():
            if (p.user_id, p.platform, p.username) == (user_id, platform, username):
                return replace(p, _events=[])
        return None

    async def list_for_user(self, user_id: str, *, limit: int = 50, offset: int = 0) -> tuple[list[Profile], int]:
        owned = [p for p in self.profiles.values() if p.user_id == user_id]
        return owned[offset : offset + limit], len(owned)

    async def delete(self, profile_id: UUID) -> None:
        self.profiles.pop(profile_id, None)

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class InMemoryProfileDataRepository(ProfileDataRepository):
    def __init__(self) -> None:
        self.snapshots: dict[UUID, ProfileData] = {}

    async def replace(self, snapshot: ProfileData) -> None:
        self.snapshots[snapshot.profile_id] = snapshot

    async def get_for_profile(self, profile_id: UUID) -> ProfileData | None:
        return self.snapshots.get(profile_id)

    async def delete_for_profile(self, profile_id: UUID) -> None:
        self.snapshots.pop(profile_id, None)


def make_profile(
    platform: Platform = Platform.INSTAGRAM,
    username: str = "sample_user",
    user_id: str = "user-1",
) -> Profile:
    profile = Profile.register(user_id=user_id, platform=platform, username=username)
    profile.collect_events()  # clear initial events
    return profile


@pytest.fixture()
def profile() -> Profile:
    return make_profile()


@pytest.fixture()
def linkedin_profile() -> Profile:
    return make_profile(Platform.LINKEDIN, "https://www.linkedin.com/in/sample-user/")


@pytest.fixture()
def profile_repo(profile: Profile, linkedin_profile: Profile) -> InMemoryProfileRepository:
    return InMemoryProfileRepository(profile, linkedin_profile)


@pytest.fixture()
def profile_data_repo() -> InMemoryProfileDataRepository:
    return InMemoryProfileDataRepository()


@pytest.fixture()
def publisher() -> MagicMock:
    pub = MagicMock()
    pub.publish = AsyncMock()
    pub.publish_many = AsyncMock()
    return pub


@pytest.fixture()
def coordinator() -> MagicMock:
    coord = MagicMock()
    coord.start_profile_scrape = AsyncMock()
    coord.fetch_results = AsyncMock(return_value=[])
    return coord
