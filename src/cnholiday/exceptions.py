"""Exceptions raised by cnholiday."""

from typing import Optional


class HolidayCalendarError(Exception):
    """Base class for all cnholiday errors."""
    pass


class FetchError(HolidayCalendarError):
    """Raised when the calendar feed cannot be retrieved."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(HolidayCalendarError):
    """Raised when a date field in the feed is malformed."""

    def __init__(self, message: str, line_number: int, value: str):
        super().__init__(f"{message} (line {line_number}: {value!r})")
        self.line_number = line_number
        self.value = value


class InvalidDateFormatError(HolidayCalendarError, ValueError):
    """Raised when a caller passes a date that is not a valid YYYY-MM-DD string."""

    def __init__(self, value: object):
        super().__init__(f"Invalid date {value!r}, expected YYYY-MM-DD")
        self.value = value


class ConfigurationError(HolidayCalendarError, ValueError):
    """Raised when settings fail validation (empty keyword, non-positive interval, ...)."""
    pass
