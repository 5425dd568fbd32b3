from enum import Enum


class ScrapeStatus(str, Enum):
    """Lifecycle of a profile's most recent scrape."""

    PENDING = "pending"
    FETCHING = "fetching"
    SCRAPING = "scraping"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Terminal states end a scrape; only a new launch moves the profile on."""
        return self in (ScrapeStatus.COMPLETED, ScrapeStatus.FAILED)
