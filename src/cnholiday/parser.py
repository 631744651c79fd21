"""
iCalendar feed parsing.

Turns a holiday subscription feed into two sets of dates: declared holidays
(days off, usually weekdays) and declared make-up workdays (usually weekends).

An event contributes to a set when its text contains the matching keyword.
Apple's Chinese holiday feed marks days off with "休" and make-up workdays
with "班", e.g.:

    BEGIN:VEVENT
    DTSTART;VALUE=DATE:20230929
    DTEND;VALUE=DATE:20231007
    SUMMARY:中秋节、国庆节 休
    END:VEVENT

DTEND is exclusive, so the event above covers 2023-09-29 through 2023-10-06.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import FrozenSet, Iterator, List, Optional, Set, Tuple

from .exceptions import ParseError
from .logging_config import get_logger

logger = get_logger(__name__)

BEGIN_EVENT = "BEGIN:VEVENT"
END_EVENT = "END:VEVENT"
DTSTART_PREFIX = "DTSTART;VALUE=DATE:"
DTEND_PREFIX = "DTEND;VALUE=DATE:"

HOLIDAY = "holiday"
WORKDAY = "workday"

# Only CRLF and LF end a content line; other Unicode separators stay in the value
_LINE_BREAK = re.compile(r"\r?\n")

Line = Tuple[int, str]


@dataclass(frozen=True)
class FeedEvent:
    """A single classified VEVENT block."""

    start: date
    end: Optional[date]
    kind: Optional[str]
    summary: str = ""

    def dates(self) -> Iterator[date]:
        """Yield the dates covered by the event, end exclusive."""
        if self.end is None:
            yield self.start
            return
        day = self.start
        while day < self.end:
            yield day
            day += timedelta(days=1)


@dataclass(frozen=True)
class ParsedFeed:
    holidays: FrozenSet[date]
    workdays: FrozenSet[date]


def unfold_lines(text: str) -> List[Line]:
    """
    Split feed text into logical lines.

    Continuation lines (starting with a space or tab) are joined onto the
    previous line. Each logical line keeps the number of its first
    physical line.
    """
    lines: List[Line] = []
    for number, raw in enumerate(_LINE_BREAK.split(text), start=1):
        if raw[:1] in (" ", "\t") and lines:
            first, content = lines[-1]
            lines[-1] = (first, content + raw[1:])
        else:
            lines.append((number, raw))
    return lines


def parse_date_value(value: str, line_number: int) -> date:
    """
    Parse a YYYYMMDD date value.

    The value must be exactly eight ASCII digits: a 4-digit year, 2-digit
    month and 2-digit day with no separators.
    """
    value = value.strip()
    if len(value) != 8 or not (value.isascii() and value.isdigit()):
        raise ParseError("Expected an 8-digit YYYYMMDD date", line_number, value)
    try:
        return date(int(value[0:4]), int(value[4:6]), int(value[6:8]))
    except ValueError as e:
        raise ParseError(f"Invalid calendar date ({e})", line_number, value) from e


def iter_event_blocks(text: str) -> Iterator[List[Line]]:
    """Yield the lines of each complete BEGIN:VEVENT ... END:VEVENT block."""
    block: Optional[List[Line]] = None
    for number, content in unfold_lines(text):
        marker = content.strip()
        if marker == BEGIN_EVENT:
            # An unterminated block is dropped when the next one begins
            block = [(number, content)]
        elif block is not None:
            block.append((number, content))
            if marker == END_EVENT:
                yield block
                block = None


def _classify(block_text: str, holiday_keyword: str, workday_keyword: str) -> Optional[str]:
    # Holiday wins when a block carries both keywords
    if holiday_keyword in block_text:
        return HOLIDAY
    if workday_keyword in block_text:
        return WORKDAY
    return None


def _event_from_block(
    block: List[Line],
    holiday_keyword: str,
    workday_keyword: str
) -> Optional[FeedEvent]:
    start: Optional[date] = None
    end: Optional[date] = None
    summary = ""

    for number, content in block:
        if content.startswith(DTSTART_PREFIX):
            if start is None:
                start = parse_date_value(content[len(DTSTART_PREFIX):], number)
        elif content.startswith(DTEND_PREFIX):
            if end is None:
                end = parse_date_value(content[len(DTEND_PREFIX):], number)
        elif content.startswith("SUMMARY") and not summary:
            summary = content.partition(":")[2].strip()

    if start is None:
        logger.debug("Skipping event without DTSTART;VALUE=DATE", extra={'line': block[0][0]})
        return None

    block_text = "\n".join(content for _, content in block)
    kind = _classify(block_text, holiday_keyword, workday_keyword)
    return FeedEvent(start=start, end=end, kind=kind, summary=summary)


def iter_events(text: str, holiday_keyword: str, workday_keyword: str) -> Iterator[FeedEvent]:
    """
    Yield every dated event in the feed, classified by keyword.

    Events without a DTSTART;VALUE=DATE field are skipped. Events matching
    neither keyword are yielded with kind None.

    Raises:
        ParseError: If a DTSTART or DTEND value is malformed
    """
    for block in iter_event_blocks(text):
        event = _event_from_block(block, holiday_keyword, workday_keyword)
        if event is not None:
            yield event


def parse_feed(text: str, holiday_keyword: str, workday_keyword: str) -> ParsedFeed:
    """
    Parse feed text into holiday and make-up workday date sets.

    Args:
        text: Raw iCalendar feed
        holiday_keyword: Substring marking an event as days off
        workday_keyword: Substring marking an event as make-up workdays

    Returns:
        ParsedFeed with frozen holiday and workday sets

    Raises:
        ParseError: If a DTSTART or DTEND value is malformed
    """
    holidays: Set[date] = set()
    workdays: Set[date] = set()
    ignored = 0

    for event in iter_events(text, holiday_keyword, workday_keyword):
        if event.kind == HOLIDAY:
            holidays.update(event.dates())
        elif event.kind == WORKDAY:
            workdays.update(event.dates())
        else:
            ignored += 1

    logger.debug(
        "Parsed calendar feed",
        extra={
            'holiday_count': len(holidays),
            'workday_count': len(workdays),
            'ignored_events': ignored,
        }
    )
    return ParsedFeed(holidays=frozenset(holidays), workdays=frozenset(workdays))
