from abc import ABC, abstractmethod
from uuid import UUID

from socialscope.domain.entities.profile_data import ProfileData


class ProfileDataRepository(ABC):
    """Port for the scraped snapshot attached to a profile."""

    @abstractmethod
    async def replace(self, snapshot: ProfileData) -> None:
        """Swap the profile's snapshot for ``snapshot``; the old one is gone afterwards."""
        ...

    @abstractmethod
    async def get_for_profile(self, profile_id: UUID) -> ProfileData | None:
        ...

    @abstractmethod
    async def delete_for_profile(self, profile_id: UUID) -> None:
        ...
