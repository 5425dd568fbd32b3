"""
Client-side scrape progress polling.

The server never pushes status; a caller samples it on a fixed interval
until the scrape reaches a terminal status or the wall-clock ceiling is hit.
"""
import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from socialscope.application.progress import stage_for
from socialscope.config import settings
from socialscope.domain.enums.scrape_status import ScrapeStatus

logger = structlog.get_logger(__name__)

TIMEOUT_STAGE = "Timed out waiting for scrape"


@dataclass(frozen=True)
class StatusSnapshot:
    status: ScrapeStatus
    error: str | None = None
    last_scraped: datetime | None = None


@dataclass(frozen=True)
class ProgressUpdate:
    status: ScrapeStatus | None
    stage: str
    progress: int
    elapsed: float
    error: str | None = None
    timed_out: bool = False

    @property
    def is_final(self) -> bool:
        return self.timed_out or (self.status is not None and self.status.is_terminal)


FetchStatus = Callable[[], Awaitable[StatusSnapshot]]


class StatusPoller:
    """
    Polls ``fetch_status`` every ``interval`` seconds.

    Iteration ends after the first terminal status or once ``timeout``
    seconds have elapsed; a timeout is reported as its own update and
    leaves the profile untouched. Calling ``stop()``, cancelling the task
    or closing the iterator prevents any further reads.
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        *,
        interval: float = settings.status_poll_interval_seconds,
        timeout: float = settings.status_poll_timeout_seconds,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._fetch_status = fetch_status
        self._interval = interval
        self._timeout = timeout
        self._clock = clock
        self._sleep = sleep
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def updates(self) -> AsyncIterator[ProgressUpdate]:
        started = self._clock()
        highest = 0
        last_status: ScrapeStatus | None = None

        while not self._stopped:
            elapsed = self._clock() - started
            if elapsed >= self._timeout:
                yield self._timed_out(last_status, highest, elapsed)
                return

            try:
                snapshot = await self._fetch_status()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("status_poll_failed", error=str(exc), elapsed=elapsed)
                snapshot = None

            if snapshot is not None:
                last_status = snapshot.status
                update = self._to_update(snapshot, highest, elapsed)
                if snapshot.status is not ScrapeStatus.FAILED:
                    highest = update.progress
                yield update
                if update.is_final:
                    return

            if self._stopped:
                return

            remaining = self._timeout - (self._clock() - started)
            await self._sleep(max(0.0, min(self._interval, remaining)))

    async def run(
        self, on_update: Callable[[ProgressUpdate], None] | None = None
    ) -> ProgressUpdate | None:
        """Drive the poll loop to completion and return the last update."""
        last: ProgressUpdate | None = None
        async for update in self.updates():
            last = update
            if on_update is not None:
                on_update(update)
        return last

    @staticmethod
    def _to_update(snapshot: StatusSnapshot, highest: int, elapsed: float) -> ProgressUpdate:
        stage = stage_for(snapshot.status)
        if snapshot.status is ScrapeStatus.FAILED:
            progress = stage.progress
        else:
            # Displayed progress never moves backwards while a scrape is live.
            progress = max(highest, stage.progress)
        return ProgressUpdate(
            status=snapshot.status,
            stage=stage.label,
            progress=progress,
            elapsed=elapsed,
            error=snapshot.error,
        )

    def _timed_out(
        self, last_status: ScrapeStatus | None, highest: int, elapsed: float
    ) -> ProgressUpdate:
        logger.warning("status_poll_timed_out", timeout=self._timeout, last_status=last_status)
        return ProgressUpdate(
            status=last_status,
            stage=TIMEOUT_STAGE,
            progress=highest,
            elapsed=elapsed,
            error=f"Scrape did not finish within {self._timeout:g} seconds",
            timed_out=True,
        )
