"""
In-memory cache of the parsed holiday feed.

The feed is refetched at most once per refresh interval (24 hours by
default) so the upstream subscription server is not hit on every query.
An empty holiday or workday set always counts as stale so a feed that
came back empty is retried on the next query.
"""

import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, FrozenSet, Optional

from .exceptions import HolidayCalendarError
from .logging_config import get_logger
from .parser import ParsedFeed

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalendarSnapshot:
    """Holiday and workday sets from one successful refresh."""

    refreshed_at: Optional[datetime] = None
    holidays: FrozenSet[date] = field(default_factory=frozenset)
    workdays: FrozenSet[date] = field(default_factory=frozenset)


class ClassificationCache:
    """
    Owns the current CalendarSnapshot and refreshes it when stale.

    Refreshes are serialized by a lock and swap in a new immutable
    snapshot, so readers see either the old sets or the new ones.
    A failed refresh leaves the previous snapshot in place.
    """

    def __init__(
        self,
        fetch: Callable[[], str],
        parse: Callable[[str], ParsedFeed],
        refresh_interval: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            fetch: Returns raw feed text, raises FetchError on failure
            parse: Turns feed text into a ParsedFeed, raises ParseError
            refresh_interval: Maximum age of a snapshot before refetching
            clock: Source of the current time
        """
        self._fetch = fetch
        self._parse = parse
        self.refresh_interval = refresh_interval
        self._clock = clock
        self._snapshot = CalendarSnapshot()
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> CalendarSnapshot:
        return self._snapshot

    @property
    def holidays(self) -> FrozenSet[date]:
        return self._snapshot.holidays

    @property
    def workdays(self) -> FrozenSet[date]:
        return self._snapshot.workdays

    @property
    def refreshed_at(self) -> Optional[datetime]:
        return self._snapshot.refreshed_at

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """Check whether the cached sets need to be refetched."""
        snapshot = self._snapshot
        if snapshot.refreshed_at is None:
            return True
        if not snapshot.holidays or not snapshot.workdays:
            return True
        now = now or self._clock()
        return snapshot.refreshed_at < now - self.refresh_interval

    def ensure_fresh(self) -> CalendarSnapshot:
        """
        Return a current snapshot, refreshing it first if stale.

        Raises:
            FetchError: If the feed could not be downloaded
            ParseError: If the feed contains a malformed date
        """
        if not self.is_stale():
            return self._snapshot

        with self._lock:
            # Another thread may have refreshed while we waited
            if not self.is_stale():
                return self._snapshot
            return self._refresh_locked()

    def refresh(self) -> CalendarSnapshot:
        """Refetch the feed regardless of staleness."""
        with self._lock:
            return self._refresh_locked()

    def invalidate(self) -> None:
        """Force the next ensure_fresh() to refetch, keeping the current sets until then."""
        with self._lock:
            previous = self._snapshot
            self._snapshot = CalendarSnapshot(
                refreshed_at=None,
                holidays=previous.holidays,
                workdays=previous.workdays,
            )

    def _refresh_locked(self) -> CalendarSnapshot:
        previous = self._snapshot
        logger.info(
            "Refreshing holiday calendar",
            extra={'last_refresh': previous.refreshed_at.isoformat() if previous.refreshed_at else None}
        )

        # Any exception here leaves self._snapshot untouched
        try:
            text = self._fetch()
            parsed = self._parse(text)
        except HolidayCalendarError as e:
            logger.error(
                "Holiday calendar refresh failed, keeping previous data: %s", type(e).__name__,
                extra={'holiday_count': len(previous.holidays), 'workday_count': len(previous.workdays)}
            )
            raise

        snapshot = CalendarSnapshot(
            refreshed_at=self._clock(),
            holidays=parsed.holidays,
            workdays=parsed.workdays,
        )
        self._snapshot = snapshot

        if not snapshot.holidays or not snapshot.workdays:
            logger.warning(
                "Calendar feed produced an empty holiday or workday set, will refetch on next query",
                extra={'holiday_count': len(snapshot.holidays), 'workday_count': len(snapshot.workdays)}
            )
        else:
            logger.info(
                "Holiday calendar refreshed",
                extra={'holiday_count': len(snapshot.holidays), 'workday_count': len(snapshot.workdays)}
            )
        return snapshot
