"""
Tests for HolidayService.

Tests cover:
- End-to-end queries against a mocked subscription URL
- Sticky configuration and cache invalidation
- Error propagation to the query caller
"""

from datetime import date

import pytest
import requests
import responses

from cnholiday.config import DEFAULT_FEED_URL, Settings
from cnholiday.exceptions import FetchError, InvalidDateFormatError
from cnholiday.service import HolidayService
from tests.helpers import NATIONAL_DAY_FEED, TEST_FEED_URL


# =============================================================================
# HTTP round trip
# =============================================================================

class TestServiceOverHttp:
    """Service with the real FeedClient and a mocked feed URL."""

    @responses.activate
    def test_golden_week_workdays(self):
        responses.add(
            responses.GET,
            DEFAULT_FEED_URL,
            body=NATIONAL_DAY_FEED.encode("utf-8"),
            status=200,
            content_type="text/calendar",
        )
        service = HolidayService()

        result = service.get_workdays_between("2023-09-28", "2023-10-15")

        assert "2023-09-28" in result
        assert "2023-10-07" in result
        assert not any("2023-09-29" <= d <= "2023-10-06" for d in result)
        assert len(responses.calls) == 1

    @responses.activate
    def test_second_query_uses_cache(self):
        responses.add(responses.GET, TEST_FEED_URL, body=NATIONAL_DAY_FEED.encode("utf-8"), status=200)
        service = HolidayService(Settings(FEED_URL=TEST_FEED_URL))

        holidays = service.get_holidays_between("2023-09-28", "2023-10-15")
        again = service.get_holidays_between("2023-09-28", "2023-10-15")

        assert holidays == again
        assert len(responses.calls) == 1

    @responses.activate
    def test_http_error_surfaces_as_fetch_error(self):
        responses.add(responses.GET, TEST_FEED_URL, status=500)
        service = HolidayService(Settings(FEED_URL=TEST_FEED_URL))

        with pytest.raises(FetchError) as exc_info:
            service.get_workdays_between("2023-09-28", "2023-10-15")

        assert exc_info.value.status_code == 500
        assert service.cache.refreshed_at is None

    @responses.activate
    def test_connection_error_surfaces_as_fetch_error(self):
        responses.add(
            responses.GET, TEST_FEED_URL, body=requests.exceptions.ConnectionError("refused")
        )
        service = HolidayService(Settings(FEED_URL=TEST_FEED_URL))

        with pytest.raises(FetchError):
            service.get_holidays_between("2023-09-28", "2023-10-15")


# =============================================================================
# Stubbed client
# =============================================================================

class TestQueries:
    """Query operations through the facade."""

    def test_workdays_and_holidays(self, service):
        assert service.get_workdays_between("2023-10-06", "2023-10-09") == [
            "2023-10-07", "2023-10-08", "2023-10-09"
        ]
        assert service.get_holidays_between("2023-10-06", "2023-10-09") == ["2023-10-06"]

    def test_single_date_checks(self, service):
        assert service.is_workday("2023-10-07")
        assert service.is_holiday(date(2023, 10, 2))

    def test_invalid_date_before_fetch(self, service, feed_client):
        with pytest.raises(InvalidDateFormatError):
            service.get_workdays_between("2023-09-28", "15/10/2023")

        assert feed_client.calls == []

    def test_failed_refresh_keeps_previous_results(self, service, feed_client, clock):
        before = service.get_workdays_between("2023-09-28", "2023-10-15")
        refreshed_at = service.cache.refreshed_at
        clock.advance(days=1, minutes=1)
        feed_client.fail_with(503)

        with pytest.raises(FetchError):
            service.get_workdays_between("2023-09-28", "2023-10-15")

        assert service.cache.refreshed_at == refreshed_at
        feed_client.recover()
        assert service.get_workdays_between("2023-09-28", "2023-10-15") == before

    def test_refresh_forces_fetch(self, service, feed_client):
        service.get_workdays_between("2023-09-28", "2023-09-28")
        snapshot = service.refresh()

        assert len(feed_client.calls) == 2
        assert date(2023, 10, 7) in snapshot.workdays

    def test_list_events(self, service):
        kinds = [(e.start, e.kind) for e in service.list_events()]

        assert kinds == [
            (date(2023, 9, 29), "holiday"),
            (date(2023, 10, 7), "workday"),
            (date(2023, 10, 8), "workday"),
            (date(2023, 9, 10), None),
        ]


class TestConfigure:
    """Configuration overrides stick and invalidate the cache."""

    def test_configure_is_sticky(self, service, feed_client):
        service.configure(feed_url="https://other.example.test/cn.ics")
        service.get_workdays_between("2023-09-28", "2023-09-28")
        service.get_workdays_between("2023-09-28", "2023-09-28")

        assert feed_client.calls == ["https://other.example.test/cn.ics"]
        assert service.settings.HOLIDAY_KEYWORD == "休"

    def test_configure_returns_self(self, service):
        assert service.configure(holiday_keyword="休") is service

    def test_changing_keywords_refetches(self, service, feed_client):
        service.get_workdays_between("2023-10-07", "2023-10-07")
        service.configure(workday_keyword="上班")

        assert service.get_workdays_between("2023-10-07", "2023-10-08") == []
        assert len(feed_client.calls) == 2

    def test_unchanged_configuration_keeps_cache(self, service, feed_client):
        service.get_workdays_between("2023-10-07", "2023-10-07")
        service.configure(feed_url=TEST_FEED_URL, holiday_keyword="休", workday_keyword="班")
        service.get_workdays_between("2023-10-07", "2023-10-07")

        assert len(feed_client.calls) == 1

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("CNHOLIDAY_FEED_URL", TEST_FEED_URL)
        monkeypatch.setenv("CNHOLIDAY_WORKDAY_KEYWORD", "补班")

        service = HolidayService()

        assert service.settings.FEED_URL == TEST_FEED_URL
        assert service.settings.WORKDAY_KEYWORD == "补班"
        assert service.settings.HOLIDAY_KEYWORD == "休"
