from socialscope.domain.enums.scrape_status import ScrapeStatus


# Mapping of valid transitions: from_status -> set of allowed to_statuses.
# PENDING and FAILED are reachable from everywhere: a new launch supersedes
# whatever came before, and a callback must always be able to fail a profile.
VALID_TRANSITIONS: dict[ScrapeStatus, frozenset[ScrapeStatus]] = {
    ScrapeStatus.PENDING: frozenset(
        {ScrapeStatus.PENDING, ScrapeStatus.FETCHING, ScrapeStatus.SCRAPING, ScrapeStatus.FAILED}
    ),
    ScrapeStatus.FETCHING: frozenset(
        {ScrapeStatus.PENDING, ScrapeStatus.SCRAPING, ScrapeStatus.FAILED}
    ),
    ScrapeStatus.SCRAPING: frozenset(
        {ScrapeStatus.PENDING, ScrapeStatus.SCRAPING, ScrapeStatus.COMPLETED, ScrapeStatus.FAILED}
    ),
    ScrapeStatus.COMPLETED: frozenset(
        {ScrapeStatus.PENDING, ScrapeStatus.SCRAPING, ScrapeStatus.FAILED}
    ),
    ScrapeStatus.FAILED: frozenset(
        {ScrapeStatus.PENDING, ScrapeStatus.SCRAPING, ScrapeStatus.FAILED}
    ),
}


class InvalidStateTransitionError(Exception):
    """Raised when an invalid scrape status transition is attempted."""

    def __init__(self, from_status: ScrapeStatus, to_status: ScrapeStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        allowed = sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {allowed}"
        )


class ScrapeStateMachine:
    """
    Validates scrape status transitions for a profile.

    Stateless: call can_transition() or validate_transition() with explicit states.
    """

    def can_transition(self, from_status: ScrapeStatus, to_status: ScrapeStatus) -> bool:
        """Return True if moving from_status → to_status is permitted."""
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: ScrapeStatus, to_status: ScrapeStatus) -> None:
        """Raise InvalidStateTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: ScrapeStatus) -> frozenset[ScrapeStatus]:
        return VALID_TRANSITIONS.get(from_status, frozenset())
