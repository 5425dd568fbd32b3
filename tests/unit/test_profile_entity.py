"""Unit tests for the Profile entity, its snapshot and handle rules."""
from uuid import uuid4

import pytest

from socialscope.domain.entities.profile import Profile
from socialscope.domain.entities.profile_data import EmptyDatasetError, ProfileData
from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.domain.events.domain_events import (
    ProfileRegisteredEvent,
    ScrapeRunStartedEvent,
    ScrapeStatusChangedEvent,
)
from socialscope.domain.handles import InvalidHandleError, normalize_handle
from socialscope.domain.state_machine.scrape_state_machine import InvalidStateTransitionError


def _make_profile() -> Profile:
    return Profile.register(user_id="user-1", platform=Platform.INSTAGRAM, username="sample_user")


class TestRegister:
    def test_starts_pending_with_no_generation(self) -> None:
        profile = _make_profile()
        assert profile.scrape_status == ScrapeStatus.PENDING
        assert profile.scrape_generation == 0
        assert profile.last_scraped is None

    def test_emits_registered_event(self) -> None:
        profile = _make_profile()
        events = profile.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], ProfileRegisteredEvent)
        assert events[0].username == "sample_user"

    def test_collect_events_clears_buffer(self) -> None:
        profile = _make_profile()
        profile.collect_events()
        assert profile.collect_events() == []


class TestScrapeLifecycle:
    def test_begin_scrape_bumps_generation_and_clears_error(self) -> None:
        profile = _make_profile()
        profile.mark_failed("boom")
        generation = profile.begin_scrape()
        assert generation == 1
        assert profile.scrape_status == ScrapeStatus.PENDING
        assert profile.scrape_error is None
        assert profile.begin_scrape() == 2

    def test_run_started_moves_to_fetching(self) -> None:
        profile = _make_profile()
        profile.begin_scrape()
        profile.collect_events()

        profile.record_run_started("run-1")

        assert profile.scrape_status == ScrapeStatus.FETCHING
        assert profile.apify_run_id == "run-1"
        events = profile.collect_events()
        assert isinstance(events[0], ScrapeStatusChangedEvent)
        assert isinstance(events[1], ScrapeRunStartedEvent)
        assert events[1].generation == 1

    def test_completion_stamps_last_scraped(self) -> None:
        profile = _make_profile()
        profile.begin_scrape()
        profile.record_run_started("run-1")
        profile.mark_scraping()
        profile.mark_completed()
        assert profile.scrape_status == ScrapeStatus.COMPLETED
        assert profile.last_scraped is not None

    def test_failure_records_reason(self) -> None:
        profile = _make_profile()
        profile.mark_failed("Scraping timed out")
        assert profile.scrape_status == ScrapeStatus.FAILED
        assert profile.scrape_error == "Scraping timed out"
        assert profile.last_scraped is None

    def test_cannot_complete_from_fetching(self) -> None:
        profile = _make_profile()
        profile.begin_scrape()
        profile.record_run_started("run-1")
        with pytest.raises(InvalidStateTransitionError):
            profile.mark_completed()
        assert profile.last_scraped is None
        assert profile.scrape_status == ScrapeStatus.FETCHING

    def test_rejected_completion_keeps_previous_last_scraped(self) -> None:
        profile = _make_profile()
        profile.begin_scrape()
        profile.mark_scraping()
        profile.mark_completed()
        first = profile.last_scraped

        profile.begin_scrape()
        profile.record_run_started("run-2")
        with pytest.raises(InvalidStateTransitionError):
            profile.mark_completed()

        assert profile.last_scraped == first

    def test_stale_generation(self) -> None:
        profile = _make_profile()
        profile.begin_scrape()
        profile.begin_scrape()
        assert profile.is_stale_generation(1) is True
        assert profile.is_stale_generation(2) is False
        assert profile.is_stale_generation(None) is False


class TestProfileData:
    def test_first_item_is_platform_specific_data(self) -> None:
        items = [{"username": "a"}, {"username": "b"}]
        snapshot = ProfileData.from_items(profile_id=uuid4(), items=items, dataset_id="D1")
        assert snapshot.platform_specific_data == {"username": "a"}
        assert snapshot.item_count == 2

    def test_empty_dataset_rejected(self) -> None:
        with pytest.raises(EmptyDatasetError, match="No data returned from scraping service"):
            ProfileData.from_items(profile_id=uuid4(), items=[])


class TestNormalizeHandle:
    def test_instagram_strips_at_and_whitespace(self) -> None:
        assert normalize_handle(Platform.INSTAGRAM, "  @sample_user ") == "sample_user"

    def test_instagram_bare_at_is_invalid(self) -> None:
        with pytest.raises(InvalidHandleError):
            normalize_handle(Platform.INSTAGRAM, "@")

    def test_linkedin_requires_profile_url(self) -> None:
        with pytest.raises(InvalidHandleError):
            normalize_handle(Platform.LINKEDIN, "sample-user")

    def test_linkedin_profile_url_kept(self) -> None:
        url = "https://www.LinkedIn.com/in/sample-user/"
        assert normalize_handle(Platform.LINKEDIN, url) == url
