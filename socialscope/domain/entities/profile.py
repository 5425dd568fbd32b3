from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.domain.events.domain_events import (
    DomainEvent,
    ProfileRegisteredEvent,
    ScrapeRunStartedEvent,
    ScrapeStatusChangedEvent,
)
from socialscope.domain.state_machine.scrape_state_machine import ScrapeStateMachine

_state_machine = ScrapeStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Profile:
    """
    A social-media handle tracked by one user, together with the state of
    its most recent scrape.

    Status changes go through the state machine and emit domain events;
    callers are responsible for collecting and publishing them.
    """

    # Identity
    id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    platform: Platform = Platform.INSTAGRAM
    username: str = ""

    # Scrape lifecycle
    scrape_status: ScrapeStatus = ScrapeStatus.PENDING
    scrape_error: str | None = None
    last_scraped: datetime | None = None

    # Correlation with the external run
    apify_run_id: str | None = None
    scrape_generation: int = 0

    # Timestamps
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    status_changed_at: datetime = field(default_factory=_utcnow)

    _events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def register(cls, *, user_id: str, platform: Platform, username: str) -> "Profile":
        profile = cls(user_id=user_id, platform=platform, username=username)
        profile._events.append(
            ProfileRegisteredEvent(
                profile_id=profile.id,
                user_id=user_id,
                platform=platform,
                username=username,
            )
        )
        return profile

    # -------------------------------------------------------------------------
    # Scrape lifecycle
    # -------------------------------------------------------------------------

    def begin_scrape(self) -> int:
        """Supersede any previous scrape and return the new generation number."""
        self.scrape_generation += 1
        self.apify_run_id = None
        self._transition_to(ScrapeStatus.PENDING, error=None)
        return self.scrape_generation

    def record_run_started(self, run_id: str) -> None:
        self.apify_run_id = run_id
        self._transition_to(ScrapeStatus.FETCHING, error=None)
        self._events.append(
            ScrapeRunStartedEvent(
                profile_id=self.id,
                run_id=run_id,
                platform=self.platform,
                generation=self.scrape_generation,
            )
        )

    def mark_scraping(self) -> None:
        self._transition_to(ScrapeStatus.SCRAPING, error=None)

    def mark_completed(self) -> None:
        self._transition_to(ScrapeStatus.COMPLETED, error=None)
        self.last_scraped = self.status_changed_at

    def mark_failed(self, reason: str) -> None:
        self._transition_to(ScrapeStatus.FAILED, error=reason)

    def is_stale_generation(self, generation: int | None) -> bool:
        """A callback carrying an older generation belongs to a superseded run."""
        return generation is not None and generation < self.scrape_generation

    def _transition_to(self, new_status: ScrapeStatus, *, error: str | None) -> None:
        _state_machine.validate_transition(self.scrape_status, new_status)

        old_status = self.scrape_status
        now = _utcnow()

        self.scrape_status = new_status
        self.scrape_error = error
        self.status_changed_at = now
        self.updated_at = now

        self._events.append(
            ScrapeStatusChangedEvent(
                profile_id=self.id,
                from_status=old_status,
                to_status=new_status,
                generation=self.scrape_generation,
                error=error,
            )
        )

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events
