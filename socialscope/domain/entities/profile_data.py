from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmptyDatasetError(ValueError):
    """Raised when a snapshot is built from a dataset with no items."""


@dataclass
class ProfileData:
    """The scraped snapshot of a profile, replaced wholesale on every successful run."""

    profile_id: UUID
    raw_data: list[dict[str, Any]]
    platform_specific_data: dict[str, Any]
    dataset_id: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def item_count(self) -> int:
        return len(self.raw_data)

    @classmethod
    def from_items(
        cls,
        *,
        profile_id: UUID,
        items: list[dict[str, Any]],
        dataset_id: str | None = None,
    ) -> "ProfileData":
        # The first item is the representative record for the profile.
        if not items:
            raise EmptyDatasetError("No data returned from scraping service")
        return cls(
            profile_id=profile_id,
            raw_data=list(items),
            platform_specific_data=items[0],
            dataset_id=dataset_id,
        )
