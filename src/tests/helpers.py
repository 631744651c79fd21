"""
Shared helpers for cnholiday tests.

Builds iCalendar feed text and provides a controllable clock and a stub
feed client that records every fetch.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from cnholiday.exceptions import FetchError

TEST_FEED_URL = "https://calendars.example.test/holidays/cn_zh.ics"


def make_event(*lines: str) -> str:
    """Wrap the given lines in a VEVENT block."""
    return "\r\n".join(["BEGIN:VEVENT", *lines, "END:VEVENT"])


def make_feed(*events: str) -> str:
    """Wrap the given event blocks in a VCALENDAR."""
    return "\r\n".join([
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Apple Inc.//iCal 4.0.1//EN",
        "X-WR-CALNAME:中国大陆节假日",
        *events,
        "END:VCALENDAR",
        "",
    ])


NATIONAL_DAY_HOLIDAY = make_event(
    "UID:20230929_holiday@example.test",
    "DTSTART;VALUE=DATE:20230929",
    "DTEND;VALUE=DATE:20231007",
    "SUMMARY:中秋节、国庆节 休",
)

NATIONAL_DAY_WORKDAY = make_event(
    "UID:20231007_workday@example.test",
    "DTSTART;VALUE=DATE:20231007",
    "SUMMARY:国庆节 补班",
)

NATIONAL_DAY_WORKDAY_2 = make_event(
    "UID:20231008_workday@example.test",
    "DTSTART;VALUE=DATE:20231008",
    "DTEND;VALUE=DATE:20231009",
    "SUMMARY:国庆节 补班",
)

UNMARKED_OBSERVANCE = make_event(
    "UID:20230910@example.test",
    "DTSTART;VALUE=DATE:20230910",
    "SUMMARY:教师节",
)

NATIONAL_DAY_FEED = make_feed(
    NATIONAL_DAY_HOLIDAY, NATIONAL_DAY_WORKDAY, NATIONAL_DAY_WORKDAY_2, UNMARKED_OBSERVANCE
)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubFeedClient:
    """Feed client returning canned text, or raising a queued FetchError."""

    def __init__(self, text: str):
        self.text = text
        self.calls: List[str] = []
        self.error: Optional[Exception] = None

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.text

    def fail_with(self, status_code: int = 503) -> None:
        self.error = FetchError(
            f"Calendar feed returned HTTP {status_code}", url=TEST_FEED_URL, status_code=status_code
        )

    def recover(self) -> None:
        self.error = None
