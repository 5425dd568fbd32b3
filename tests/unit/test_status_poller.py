"""Unit tests for the client-side status poller, driven by a fake clock."""
import asyncio

import pytest

from socialscope.client.status_poller import StatusPoller, StatusSnapshot
from socialscope.domain.enums.scrape_status import ScrapeStatus


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


class ScriptedBackend:
    """Reports the status a profile would have at the clock's current time."""

    def __init__(self, clock: FakeClock, timeline: list[tuple[float, ScrapeStatus]], error: str | None = None) -> None:
        self.clock = clock
        self.timeline = timeline
        self.error = error
        self.reads: list[float] = []

    async def __call__(self) -> StatusSnapshot:
        self.reads.append(self.clock.now)
        status = ScrapeStatus.PENDING
        for at, value in self.timeline:
            if self.clock.now >= at:
                status = value
        error = self.error if status is ScrapeStatus.FAILED else None
        return StatusSnapshot(status=status, error=error)


def _poller(backend, clock: FakeClock, interval: float = 10, timeout: float = 600) -> StatusPoller:
    return StatusPoller(backend, interval=interval, timeout=timeout, clock=clock, sleep=clock.sleep)


class TestTermination:
    @pytest.mark.asyncio
    async def test_stops_after_first_completed_read(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(
            clock,
            [(0, ScrapeStatus.FETCHING), (30, ScrapeStatus.SCRAPING), (45, ScrapeStatus.COMPLETED)],
        )

        last = await _poller(backend, clock).run()

        assert backend.reads == [0, 10, 20, 30, 40, 50]
        assert last.status == ScrapeStatus.COMPLETED
        assert last.progress == 100
        assert last.stage == "Analysis complete"

    @pytest.mark.asyncio
    async def test_stops_after_failed_read_and_surfaces_error(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(
            clock, [(0, ScrapeStatus.FETCHING), (15, ScrapeStatus.FAILED)], error="Scraping failed"
        )

        last = await _poller(backend, clock).run()

        assert backend.reads == [0, 10, 20]
        assert last.status == ScrapeStatus.FAILED
        assert last.progress == 0
        assert last.error == "Scraping failed"

    @pytest.mark.asyncio
    async def test_timeout_emits_update_and_stops_reading(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(clock, [(0, ScrapeStatus.FETCHING)])

        updates = [u async for u in _poller(backend, clock, interval=10, timeout=35).updates()]

        assert backend.reads == [0, 10, 20, 30]
        last = updates[-1]
        assert last.timed_out is True
        assert last.status == ScrapeStatus.FETCHING
        assert last.elapsed == 35
        assert "35 seconds" in last.error

    @pytest.mark.asyncio
    async def test_terminal_before_timeout_wins(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(clock, [(0, ScrapeStatus.COMPLETED)])

        updates = [u async for u in _poller(backend, clock, timeout=5).updates()]

        assert len(updates) == 1
        assert updates[0].timed_out is False


class TestProgress:
    @pytest.mark.asyncio
    async def test_progress_follows_stage_table(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(
            clock,
            [(0, ScrapeStatus.PENDING), (10, ScrapeStatus.FETCHING), (20, ScrapeStatus.SCRAPING), (30, ScrapeStatus.COMPLETED)],
        )

        progress = [u.progress async for u in _poller(backend, clock).updates()]

        assert progress == [10, 40, 80, 100]

    @pytest.mark.asyncio
    async def test_progress_never_moves_backwards(self) -> None:
        clock = FakeClock()
        # A relaunch elsewhere drops the profile back to pending mid-watch.
        backend = ScriptedBackend(
            clock, [(0, ScrapeStatus.FETCHING), (10, ScrapeStatus.PENDING), (20, ScrapeStatus.COMPLETED)]
        )

        progress = [u.progress async for u in _poller(backend, clock).updates()]

        assert progress == [40, 40, 100]


class TestCancellation:
    @pytest.mark.asyncio
    async def test_stop_prevents_further_reads(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(clock, [(0, ScrapeStatus.FETCHING)])
        poller = _poller(backend, clock)

        async for update in poller.updates():
            poller.stop()

        assert backend.reads == [0]
        assert poller.stopped is True

    @pytest.mark.asyncio
    async def test_closing_iterator_prevents_further_reads(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(clock, [(0, ScrapeStatus.FETCHING)])
        updates = _poller(backend, clock).updates()

        await updates.__anext__()
        await updates.aclose()

        assert backend.reads == [0]

    @pytest.mark.asyncio
    async def test_task_cancellation(self) -> None:
        reads = []

        async def fetch() -> StatusSnapshot:
            reads.append(1)
            return StatusSnapshot(status=ScrapeStatus.FETCHING)

        poller = StatusPoller(fetch, interval=0.01, timeout=60)
        task = asyncio.create_task(poller.run())
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        count = len(reads)
        await asyncio.sleep(0.05)
        assert len(reads) == count


class TestResilience:
    @pytest.mark.asyncio
    async def test_read_errors_keep_polling(self) -> None:
        clock = FakeClock()
        calls = []

        async def flaky() -> StatusSnapshot:
            calls.append(clock.now)
            if len(calls) == 1:
                raise ConnectionError("api down")
            return StatusSnapshot(status=ScrapeStatus.COMPLETED)

        last = await _poller(flaky, clock).run()

        assert calls == [0, 10]
        assert last.status == ScrapeStatus.COMPLETED

    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            StatusPoller(lambda: None, interval=0)

    @pytest.mark.asyncio
    async def test_run_reports_every_update(self) -> None:
        clock = FakeClock()
        backend = ScriptedBackend(clock, [(0, ScrapeStatus.SCRAPING), (10, ScrapeStatus.COMPLETED)])
        seen = []

        await _poller(backend, clock).run(seen.append)

        assert [u.status for u in seen] == [ScrapeStatus.SCRAPING, ScrapeStatus.COMPLETED]
