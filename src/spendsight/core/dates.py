#!/usr/bin/env python3
"""
Timestamp Parsing and Calendar Helpers

Turns the loosely-typed date cells found in the source workbooks into naive
``datetime`` values. Cells arrive as spreadsheet serial numbers, as typed
datetimes, or as strings in one of several human layouts; anything that
cannot be understood parses to ``None`` rather than raising.

No timezone conversion is performed anywhere: every value is a naive local
time.
"""

import calendar
import math
import re
from datetime import date, datetime, timedelta

# Day count between the spreadsheet epoch (1899-12-30) and 1970-01-01.
SERIAL_EPOCH_OFFSET = 25569
UNIX_EPOCH = datetime(1970, 1, 1)

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

# Tried in order after ISO parsing; month-name layouts only.
_VERBOSE_FORMATS = (
    "%b %d, %Y, %I:%M %p",
    "%B %d, %Y, %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y, %I:%M:%S %p",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%d %b %Y %H:%M:%S",
    "%d-%b-%Y",
)

_DAY_FIRST_RE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:[ T,]+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)

_SERIAL_TEXT_RE = re.compile(r"^\d+(?:\.\d+)?$")


def serial_to_datetime(serial: float) -> datetime:
    """
    Convert a spreadsheet serial day number to a datetime.

    The fractional (time-of-day) part is discarded.

    Example:
        serial_to_datetime(45587) -> datetime(2024, 10, 22, 0, 0)
    """
    return UNIX_EPOCH + timedelta(days=math.floor(serial) - SERIAL_EPOCH_OFFSET)


def _parse_iso(text: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _parse_verbose(text: str) -> datetime | None:
    for fmt in _VERBOSE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_day_first(text: str) -> datetime | None:
    match = _DAY_FIRST_RE.match(text)
    if not match:
        return None
    day, month, year, hour, minute, second = match.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def parse_timestamp(raw: object) -> datetime | None:
    """
    Parse a workbook date cell into a naive datetime.

    Args:
        raw: Serial day number, datetime/date, string, or None

    Returns:
        Naive datetime, or None when the value cannot be understood

    Examples:
        parse_timestamp(45587) -> datetime(2024, 10, 22)
        parse_timestamp("2024-10-22 14:05:00") -> datetime(2024, 10, 22, 14, 5)
        parse_timestamp("Oct 22, 2024, 2:05 PM") -> datetime(2024, 10, 22, 14, 5)
        parse_timestamp("14/11/2025 07:25:18") -> datetime(2025, 11, 14, 7, 25, 18)
        parse_timestamp("n/a") -> None
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, datetime):
        return raw.replace(tzinfo=None)

    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)

    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return None
        try:
            return serial_to_datetime(raw)
        except OverflowError:
            return None

    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    # Numbers stored as text are still serial days
    if _SERIAL_TEXT_RE.match(text):
        return parse_timestamp(float(text) if "." in text else int(text))

    return _parse_iso(text) or _parse_verbose(text) or _parse_day_first(text)


def start_of_day(value: datetime) -> datetime:
    """Midnight at the start of the value's calendar day."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    """Last instant (23:59:59.999) of the value's calendar day."""
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a 1-indexed month."""
    return calendar.monthrange(year, month)[1]


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, days_in_month(year, month))
    return value.replace(year=year, month=month, day=day)


def month_name(month: int) -> str:
    """Full English name for a 1-indexed month."""
    return MONTH_NAMES[month - 1]


def format_date(value: datetime | None) -> str | None:
    """Format as YYYY-MM-DD, passing None through."""
    return value.strftime("%Y-%m-%d") if value else None


def format_datetime(value: datetime | None) -> str | None:
    """Format as YYYY-MM-DD HH:MM:SS, passing None through."""
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else None
