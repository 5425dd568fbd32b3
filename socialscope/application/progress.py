from dataclasses import dataclass

from socialscope.domain.enums.scrape_status import ScrapeStatus


@dataclass(frozen=True)
class ScrapeStage:
    label: str
    progress: int


# Display-only mapping; it never feeds back into profile state.
SCRAPE_STAGES: dict[ScrapeStatus, ScrapeStage] = {
    ScrapeStatus.PENDING: ScrapeStage("Queued for scraping", 10),
    ScrapeStatus.FETCHING: ScrapeStage("Scraping profile data", 40),
    ScrapeStatus.SCRAPING: ScrapeStage("Processing results", 80),
    ScrapeStatus.COMPLETED: ScrapeStage("Analysis complete", 100),
    ScrapeStatus.FAILED: ScrapeStage("Scraping failed", 0),
}


def stage_for(status: ScrapeStatus) -> ScrapeStage:
    return SCRAPE_STAGES[status]
