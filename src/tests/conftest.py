"""
Shared pytest fixtures for cnholiday tests.

Provides a sample holiday feed, a controllable clock and a HolidayService
wired to a stub feed client.
"""

import logging
from datetime import datetime

import pytest

from cnholiday.config import Settings
from cnholiday.service import HolidayService
from tests.helpers import NATIONAL_DAY_FEED, TEST_FEED_URL, FakeClock, StubFeedClient


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Clear CNHOLIDAY_* variables so Settings() sees only defaults."""
    for key in [
        'CNHOLIDAY_FEED_URL', 'CNHOLIDAY_HOLIDAY_KEYWORD', 'CNHOLIDAY_WORKDAY_KEYWORD',
        'CNHOLIDAY_REFRESH_INTERVAL_HOURS', 'CNHOLIDAY_REQUEST_TIMEOUT',
        'CNHOLIDAY_LOG_FORMAT', 'CNHOLIDAY_LOG_LEVEL',
    ]:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so handlers bound to a captured stderr do not leak between tests."""
    logger = logging.getLogger("cnholiday")
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def national_day_feed() -> str:
    """Feed with the 2023 Mid-Autumn/National Day break and its make-up workdays."""
    return NATIONAL_DAY_FEED


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2023, 9, 1, 9, 0, 0))


@pytest.fixture
def feed_client(national_day_feed) -> StubFeedClient:
    return StubFeedClient(national_day_feed)


@pytest.fixture
def service(feed_client, clock) -> HolidayService:
    """HolidayService wired to the stub client and fake clock."""
    return HolidayService(Settings(FEED_URL=TEST_FEED_URL), feed_client=feed_client, clock=clock)
