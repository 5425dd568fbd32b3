from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from socialscope.domain.enums.platform import Platform


@dataclass
class ScrapeRunResult:
    run_id: str
    status: str
    dataset_id: str | None = None


class ScrapeCoordinatorInterface(ABC):
    """Port for starting actor runs and reading their datasets."""

    @abstractmethod
    async def start_profile_scrape(
        self, *, platform: Platform, handle: str, webhook_url: str
    ) -> ScrapeRunResult:
        ...

    @abstractmethod
    async def fetch_results(self, dataset_id: str) -> list[dict[str, Any]]:
        ...
