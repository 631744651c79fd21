"""
Logging configuration for cnholiday.

Library modules only create loggers under the "cnholiday" namespace. The CLI
(or an embedding application) calls setup_logging() once to attach a handler
to that namespace, either as JSON lines for log aggregation or as short
human-readable lines for a terminal.

Usage:
    from cnholiday.logging_config import setup_logging, get_logger

    setup_logging()  # JSON when CNHOLIDAY_LOG_FORMAT=json
    logger = get_logger(__name__)

    logger.info("Holiday calendar refreshed", extra={'holiday_count': 28, 'workday_count': 6})
"""

import json
import logging
import os
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

PACKAGE_LOGGER = 'cnholiday'

# Attributes every LogRecord carries; anything else came in through extra=
RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the extra= fields attached to a record, in insertion order."""
    return {k: v for k, v in record.__dict__.items() if k not in RESERVED_ATTRIBUTES}


def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class JsonFormatter(logging.Formatter):
    """
    Format log records as JSON, one object per line.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.000+00:00",
        "level": "INFO",
        "logger": "cnholiday.cache",
        "message": "Holiday calendar refreshed",
        "holiday_count": 28,
        "workday_count": 6
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key, value in record_extras(record).items():
            log_obj.setdefault(key, value)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        # Holiday summaries are Chinese text
        return json.dumps(log_obj, default=_json_default, ensure_ascii=False)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for CLI output.

    Output format:
    2024-01-15 10:30:00 INFO  [cache] Holiday calendar refreshed holidays=28 workdays=6
    2024-01-15 10:30:00 DEBUG [feed_client] Fetched calendar feed url=https://... bytes=10240 took=412ms
    """

    # Short names for the fields the library logs
    LABELS = {
        'holiday_count': 'holidays',
        'workday_count': 'workdays',
        'ignored_events': 'ignored',
        'duration_ms': 'took',
        'feed_url': 'url',
        'holiday_keyword': 'holiday',
        'workday_keyword': 'workday',
    }

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def _field(self, key: str, value: Any) -> str:
        label = self.LABELS.get(key, key)
        if key == 'duration_ms':
            return f"{label}={value}ms"
        if value is None:
            return f"{label}=-"
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        return f"{label}={value}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        level = record.levelname.ljust(5)
        color = self.LEVEL_COLORS.get(record.levelname) if self.use_colors else None
        if color:
            level = f"{color}{level}{self.RESET}"

        module = record.name
        if module.startswith(PACKAGE_LOGGER + '.'):
            module = module[len(PACKAGE_LOGGER) + 1:]

        parts = [f"{timestamp} {level} [{module}] {record.getMessage()}"]
        parts.extend(self._field(k, v) for k, v in record_extras(record).items())
        output = " ".join(parts)

        if record.exc_info:
            output += f"\n{self.formatException(record.exc_info)}"
        return output


def setup_logging(json_format: Optional[bool] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the cnholiday package logger.

    Calling it again replaces the previous handler. The package logger does
    not propagate, so an application's root handlers do not print records twice.

    Args:
        json_format: Use JSON (True) or human-readable (False) output.
                     If None, uses JSON when CNHOLIDAY_LOG_FORMAT=json.
        level: Log level name. Defaults to CNHOLIDAY_LOG_LEVEL or INFO.

    Returns:
        The configured package logger
    """
    if json_format is None:
        json_format = os.getenv('CNHOLIDAY_LOG_FORMAT', '').lower() == 'json'
    if level is None:
        level = os.getenv('CNHOLIDAY_LOG_LEVEL', 'INFO')
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else HumanFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
