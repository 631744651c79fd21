"""
cnholiday - Chinese statutory holiday lookups from an iCalendar subscription.

Installation:
    pip install -e .

Query workdays and holidays:
    from cnholiday import HolidayService

    service = HolidayService()
    service.get_workdays_between("2023-09-28", "2023-10-15")
    service.get_holidays_between("2023-09-28", "2023-10-15")

Use another subscription or keywords:
    service.configure(feed_url="https://example.com/holidays.ics",
                      holiday_keyword="休", workday_keyword="班")
"""

from .cache import CalendarSnapshot, ClassificationCache
from .config import Settings
from .exceptions import (
    ConfigurationError,
    FetchError,
    HolidayCalendarError,
    InvalidDateFormatError,
    ParseError,
)
from .feed_client import FeedClient
from .parser import FeedEvent, ParsedFeed, parse_feed
from .query import QueryEngine
from .service import HolidayService

__version__ = "0.1.0"
__all__ = [
    "HolidayService",
    "Settings",
    "FeedClient",
    "ClassificationCache",
    "CalendarSnapshot",
    "QueryEngine",
    "FeedEvent",
    "ParsedFeed",
    "parse_feed",
    "HolidayCalendarError",
    "ConfigurationError",
    "FetchError",
    "ParseError",
    "InvalidDateFormatError",
]
