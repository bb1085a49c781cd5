"""
Date helpers for the CSV wire format.

Dates serialize as yyyy-MM-dd, date-times as yyyy-MM-dd HH:mm:ss.
Parsing is lenient about a few legacy spellings found in older files.
"""

from datetime import date, datetime
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATE_INPUT_FORMATS = (DATE_FORMAT, "%d-%m-%Y")
_DATETIME_INPUT_FORMATS = (DATETIME_FORMAT, "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f", DATE_FORMAT)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a date cell. Blank -> None. Unparseable -> ValueError."""
    if value is None or not value.strip():
        return None
    text = value.strip()
    for fmt in _DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value!r} (expected yyyy-MM-dd)")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a date-time cell. A bare date reads as midnight."""
    if value is None or not value.strip():
        return None
    text = value.strip()
    for fmt in _DATETIME_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Invalid date-time: {value!r} (expected yyyy-MM-dd HH:mm:ss)")


def format_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def format_datetime(value: Optional[datetime]) -> str:
    return value.strftime(DATETIME_FORMAT) if value else ""
