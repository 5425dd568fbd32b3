from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ProfileRegisteredEvent(DomainEvent):
    """Published when a user starts tracking a new handle."""

    profile_id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    platform: Platform = Platform.INSTAGRAM
    username: str = ""


@dataclass(frozen=True)
class ScrapeStatusChangedEvent(DomainEvent):
    """Published whenever a profile's scrape status is written."""

    profile_id: UUID = field(default_factory=uuid4)
    from_status: ScrapeStatus | None = None
    to_status: ScrapeStatus = ScrapeStatus.PENDING
    generation: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ScrapeRunStartedEvent(DomainEvent):
    """Published when an Apify actor run has been accepted for a profile."""

    profile_id: UUID = field(default_factory=uuid4)
    run_id: str = ""
    platform: Platform = Platform.INSTAGRAM
    generation: int = 0
