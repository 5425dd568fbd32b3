from abc import ABC, abstractmethod
from uuid import UUID

from socialscope.domain.entities.profile import Profile
from socialscope.domain.enums.platform import Platform


class ProfileRepository(ABC):
    """Port for persisting and querying Profile aggregates."""

    @abstractmethod
    async def save(self, profile: Profile) -> None:
        ...

    @abstractmethod
    async def get_by_id(self, profile_id: UUID) -> Profile | None:
        ...

    @abstractmethod
    async def find_by_handle(
        self, *, user_id: str, platform: Platform, username: str
    ) -> Profile | None:
        ...

    @abstractmethod
    async def list_for_user(
        self, user_id: str, *, limit: int = 50, offset: int = 0
    ) -> tuple[list[Profile], int]:
        """Return (profiles, total_count), most recently scraped first."""
        ...

    @abstractmethod
    async def delete(self, profile_id: UUID) -> None:
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Make every write so far visible to other readers."""
        ...

    @abstractmethod
    async def save_run_started(self, profile: Profile) -> bool:
        """Persist the PENDING -> FETCHING move of the profile's current launch.

        Writes nothing and returns False when the stored profile is no longer
        PENDING at that generation, e.g. the run's callback already landed.
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every write since the last commit."""
        ...
