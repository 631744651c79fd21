import re
from datetime import date, datetime, timedelta
from typing import FrozenSet, Iterator, List, Tuple, Union

from .cache import CalendarSnapshot, ClassificationCache
from .exceptions import InvalidDateFormatError

DateLike = Union[str, date]

_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_query_date(value: DateLike) -> date:
    """
    Parse a YYYY-MM-DD string (or pass through a date).

    Raises:
        InvalidDateFormatError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise InvalidDateFormatError(value)
    try:
        return date(int(value[0:4]), int(value[5:7]), int(value[8:10]))
    except ValueError as e:
        raise InvalidDateFormatError(value) from e


def format_date(day: date) -> str:
    return day.isoformat()


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5  # Saturday or Sunday


def _is_workday(day: date, holidays: FrozenSet[date], workdays: FrozenSet[date]) -> bool:
    return day in workdays or (day not in holidays and not is_weekend(day))


def _is_holiday(day: date, holidays: FrozenSet[date], workdays: FrozenSet[date]) -> bool:
    return day in holidays or (day not in workdays and is_weekend(day))


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive; nothing if start > end."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


class QueryEngine:
    """
    Classifies dates as workdays or holidays.

    A declared make-up workday is always a workday and a declared holiday
    is always a holiday; any other date follows the Monday-to-Friday rule.
    Every query validates its arguments before touching the cache and reads
    a single snapshot for the whole range.
    """

    def __init__(self, cache: ClassificationCache):
        self.cache = cache

    def _snapshot(self) -> CalendarSnapshot:
        return self.cache.ensure_fresh()

    def classify_range(self, start: DateLike, end: DateLike) -> List[Tuple[date, bool]]:
        """Return (date, is_workday) pairs for every date in [start, end]."""
        start_date = parse_query_date(start)
        end_date = parse_query_date(end)
        snapshot = self._snapshot()
        return [
            (day, _is_workday(day, snapshot.holidays, snapshot.workdays))
            for day in iter_days(start_date, end_date)
        ]

    def workdays_between(self, start: DateLike, end: DateLike) -> List[str]:
        """Return the workdays in [start, end] as ascending YYYY-MM-DD strings."""
        start_date = parse_query_date(start)
        end_date = parse_query_date(end)
        snapshot = self._snapshot()
        return [
            format_date(day) for day in iter_days(start_date, end_date)
            if _is_workday(day, snapshot.holidays, snapshot.workdays)
        ]

    def holidays_between(self, start: DateLike, end: DateLike) -> List[str]:
        """Return the holidays (including ordinary weekends) in [start, end] as ascending YYYY-MM-DD strings."""
        start_date = parse_query_date(start)
        end_date = parse_query_date(end)
        snapshot = self._snapshot()
        return [
            format_date(day) for day in iter_days(start_date, end_date)
            if _is_holiday(day, snapshot.holidays, snapshot.workdays)
        ]

    def is_workday(self, day: DateLike) -> bool:
        target = parse_query_date(day)
        snapshot = self._snapshot()
        return _is_workday(target, snapshot.holidays, snapshot.workdays)

    def is_holiday(self, day: DateLike) -> bool:
        target = parse_query_date(day)
        snapshot = self._snapshot()
        return _is_holiday(target, snapshot.holidays, snapshot.workdays)
