"""
Holiday calendar service.

HolidayService ties together configuration, the feed client, the cache and
the query engine. Create one per process and pass it to whoever needs it:

    from cnholiday import HolidayService

    service = HolidayService()
    service.get_workdays_between("2023-09-28", "2023-10-15")

Custom feeds and keywords stick once configured:

    service.configure(feed_url="https://example.com/cn.ics", holiday_keyword="假")
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .cache import CalendarSnapshot, ClassificationCache
from .config import Settings, load_settings
from .feed_client import FeedClient
from .logging_config import get_logger
from .parser import FeedEvent, iter_events, parse_feed
from .query import DateLike, QueryEngine

logger = get_logger(__name__)


class HolidayService:
    """Workday and holiday lookups backed by a cached calendar subscription."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        feed_client: Optional[FeedClient] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            settings: Feed URL, keywords and cache settings. Defaults to Settings()
                      (which reads CNHOLIDAY_* environment variables).
            feed_client: Client used to download the feed
            clock: Source of the current time, used for cache staleness
        """
        self.settings = settings or load_settings()
        self.feed_client = feed_client or FeedClient(timeout=self.settings.REQUEST_TIMEOUT)
        self.cache = ClassificationCache(
            fetch=self._fetch_feed,
            parse=self._parse_feed,
            refresh_interval=timedelta(hours=self.settings.REFRESH_INTERVAL_HOURS),
            clock=clock,
        )
        self.engine = QueryEngine(self.cache)

    def _fetch_feed(self) -> str:
        return self.feed_client.fetch(self.settings.FEED_URL)

    def _parse_feed(self, text: str):
        return parse_feed(text, self.settings.HOLIDAY_KEYWORD, self.settings.WORKDAY_KEYWORD)

    def configure(
        self,
        feed_url: Optional[str] = None,
        holiday_keyword: Optional[str] = None,
        workday_keyword: Optional[str] = None
    ) -> "HolidayService":
        """
        Override the feed URL and/or keywords.

        Arguments left as None keep their current value. If anything
        changed, the next query refetches the feed.

        Raises:
            ConfigurationError: If an override fails validation
        """
        updated = self.settings.with_overrides(
            FEED_URL=feed_url,
            HOLIDAY_KEYWORD=holiday_keyword,
            WORKDAY_KEYWORD=workday_keyword,
        )
        if updated != self.settings:
            self.settings = updated
            self.cache.invalidate()
            logger.info(
                "Holiday calendar reconfigured",
                extra={
                    'feed_url': updated.FEED_URL,
                    'holiday_keyword': updated.HOLIDAY_KEYWORD,
                    'workday_keyword': updated.WORKDAY_KEYWORD,
                }
            )
        return self

    def get_workdays_between(self, start_date: DateLike, end_date: DateLike) -> List[str]:
        """
        Get the workdays between two dates, both inclusive.

        Workdays are Monday to Friday minus declared holidays, plus declared
        make-up workdays.

        Args:
            start_date: First date, "YYYY-MM-DD"
            end_date: Last date, "YYYY-MM-DD"

        Returns:
            Ascending list of "YYYY-MM-DD" strings; empty if start_date > end_date

        Raises:
            InvalidDateFormatError: If either date is malformed
            FetchError: If the feed needed refreshing and could not be fetched
            ParseError: If the refreshed feed contains a malformed date
        """
        return self.engine.workdays_between(start_date, end_date)

    def get_holidays_between(self, start_date: DateLike, end_date: DateLike) -> List[str]:
        """
        Get the rest days between two dates, both inclusive.

        Rest days are declared holidays plus weekends that are not make-up
        workdays. Same arguments and errors as get_workdays_between().
        """
        return self.engine.holidays_between(start_date, end_date)

    def is_workday(self, day: DateLike) -> bool:
        return self.engine.is_workday(day)

    def is_holiday(self, day: DateLike) -> bool:
        return self.engine.is_holiday(day)

    def refresh(self) -> CalendarSnapshot:
        """Refetch the feed now, ignoring the cache window."""
        return self.cache.refresh()

    def list_events(self) -> List[FeedEvent]:
        """Fetch the feed and return its dated events, classified by the configured keywords."""
        text = self._fetch_feed()
        return list(iter_events(text, self.settings.HOLIDAY_KEYWORD, self.settings.WORKDAY_KEYWORD))
