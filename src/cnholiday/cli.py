"""
CLI for Chinese holiday and workday lookups.

Usage:
    cnholiday workdays 2023-09-28 2023-10-15
    cnholiday holidays 2023-09-28 2023-10-15 --json
    cnholiday check 2023-10-07
    cnholiday events

Options:
    --feed-url          iCalendar subscription URL (default: Apple cn_zh.ics)
    --holiday-keyword   Substring marking days off (default: 休)
    --workday-keyword   Substring marking make-up workdays (default: 班)
    --verbose, -v       Debug logging
"""

import argparse
import json
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import load_settings
from .exceptions import HolidayCalendarError
from .logging_config import get_logger, setup_logging
from .parser import HOLIDAY, WORKDAY
from .service import HolidayService

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cnholiday",
        description="Chinese statutory holiday and make-up workday lookups"
    )
    parser.add_argument("--feed-url", default=None, help="iCalendar subscription URL")
    parser.add_argument("--holiday-keyword", default=None, help="Substring marking days off")
    parser.add_argument("--workday-keyword", default=None, help="Substring marking make-up workdays")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("workdays", "List workdays in a date range (inclusive)"),
        ("holidays", "List holidays and rest days in a date range (inclusive)"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("start", help="Start date, YYYY-MM-DD")
        sub.add_argument("end", help="End date, YYYY-MM-DD")
        sub.add_argument("--json", action="store_true", help="Print a JSON array")

    check = subparsers.add_parser("check", help="Tell whether a date is a workday or a holiday")
    check.add_argument("date", help="Date, YYYY-MM-DD")

    subparsers.add_parser("events", help="List the classified events in the feed")

    return parser


def _print_dates(dates: List[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps(dates))
    else:
        for day in dates:
            print(day)


def run(args: argparse.Namespace, service: HolidayService) -> int:
    if args.command == "workdays":
        _print_dates(service.get_workdays_between(args.start, args.end), args.json)
    elif args.command == "holidays":
        _print_dates(service.get_holidays_between(args.start, args.end), args.json)
    elif args.command == "check":
        print("workday" if service.is_workday(args.date) else "holiday")
    elif args.command == "events":
        labels = {HOLIDAY: "holiday", WORKDAY: "workday", None: "-"}
        for event in service.list_events():
            end = event.end.isoformat() if event.end else ""
            print(f"{event.start.isoformat()}\t{end}\t{labels[event.kind]}\t{event.summary}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        service = HolidayService(load_settings())
        service.configure(
            feed_url=args.feed_url,
            holiday_keyword=args.holiday_keyword,
            workday_keyword=args.workday_keyword,
        )
        return run(args, service)
    except HolidayCalendarError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
