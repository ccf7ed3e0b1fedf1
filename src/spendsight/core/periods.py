#!/usr/bin/env python3
"""
Period Resolution

Turns free-form period tokens ("last_month", "week_2_november_2024",
"november", "2024") into concrete date ranges.

Tokens are normalized (lowercase, whitespace and hyphens collapsed to
underscores) and then offered to an ordered chain of matchers; the first
matcher that recognizes the token wins:

1. fixed relative keywords (today, last_week, last_3_months, ...)
2. week-of-month expressions (five surface syntaxes)
3. explicit month + year, in either order
4. a bare year
5. a bare month name
6. anything else: All Time

Calendar-derived ranges end at 23:59:59.999 of their last day, so filtering
with ``start <= t <= end`` is inclusive whatever the time-of-day of ``t``.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum

from .dates import add_months, days_in_month, end_of_day, month_name, start_of_day

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100
LAST_WEEK = -1


class PeriodKind(Enum):
    """What kind of expression produced a period."""

    TODAY = "today"
    RELATIVE = "relative"
    CALENDAR_MONTH = "calendar_month"
    CALENDAR_YEAR = "calendar_year"
    WEEK_OF_MONTH = "week_of_month"
    UNBOUNDED = "unbounded"


@dataclass(frozen=True)
class Period:
    """
    A date range with a human label.

    Either bound may be None (open); both None means "All Time".
    """

    start: datetime | None
    end: datetime | None
    label: str
    kind: PeriodKind = PeriodKind.UNBOUNDED

    @property
    def is_unbounded(self) -> bool:
        """True when neither bound is set."""
        return self.start is None and self.end is None

    def contains(self, value: datetime) -> bool:
        """Inclusive containment test honoring open bounds."""
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "label": self.label,
            "kind": self.kind.value,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


ALL_TIME = Period(start=None, end=None, label="All Time")

_MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_SELECTORS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "1st": 1,
    "2nd": 2,
    "3rd": 3,
    "4th": 4,
    "5th": 5,
    "1": 1,
    "2": 2,
    "3": 3,
    "4": 4,
    "5": 5,
    "last": LAST_WEEK,
}

_MON = "|".join(sorted(_MONTHS, key=len, reverse=True))
_SEL = "|".join(sorted(_SELECTORS, key=len, reverse=True))
_YEAR = r"(?:_(?P<year>\d{4}))?"

_WEEK_PATTERNS = [
    # week_2_november_2024, week_last_of_december
    re.compile(rf"week_(?P<sel>{_SEL})_(?:of_)?(?P<month>{_MON}){_YEAR}"),
    # 2nd_week_of_november, last_week_of_december_2023, second_week_november_2024
    re.compile(rf"(?P<sel>{_SEL})_week_(?:of_|in_)?(?P<month>{_MON}){_YEAR}"),
    # november_2024_week_2, november_week_last
    re.compile(rf"(?P<month>{_MON}){_YEAR}_week_(?P<sel>{_SEL})"),
    # november_2nd_week, december_2023_last_week
    re.compile(rf"(?P<month>{_MON}){_YEAR}_(?P<sel>{_SEL})_week"),
    # w2_november_2024
    re.compile(rf"w(?P<sel>[1-5])_(?P<month>{_MON}){_YEAR}"),
]

_MONTH_YEAR_PATTERNS = [
    re.compile(rf"(?P<month>{_MON}|\d{{1,2}})_(?P<year>\d{{4}})"),
    re.compile(rf"(?P<year>\d{{4}})_(?P<month>{_MON}|\d{{1,2}})"),
]

_YEAR_PATTERN = re.compile(r"\d{4}")
_MONTH_PATTERN = re.compile(rf"(?P<month>{_MON})")


def normalize_token(token: str) -> str:
    """
    Normalize a period token for matching.

    Example:
        normalize_token("  Last-Week of December ") -> "last_week_of_december"
    """
    normalized = re.sub(r"[\s\-]+", "_", token.strip().lower())
    return re.sub(r"_+", "_", normalized).strip("_")


def calendar_month_period(year: int, month: int) -> Period:
    """Full calendar month, 1-indexed."""
    start = datetime(year, month, 1)
    end = end_of_day(datetime(year, month, days_in_month(year, month)))
    return Period(start, end, f"{month_name(month)} {year}", PeriodKind.CALENDAR_MONTH)


def calendar_year_period(year: int) -> Period:
    """Full calendar year."""
    return Period(
        datetime(year, 1, 1),
        end_of_day(datetime(year, 12, 31)),
        f"Year {year}",
        PeriodKind.CALENDAR_YEAR,
    )


def week_of_month_period(year: int, month: int, week: int) -> Period | None:
    """
    Week N (1..5) of a month, or the last 7 days of it for LAST_WEEK.

    Week N covers days (N-1)*7+1 through min(N*7, days in month). Returns
    None when week N would start after the month has ended.
    """
    total_days = days_in_month(year, month)

    if week == LAST_WEEK:
        first_day = max(1, total_days - 6)
        last_day = total_days
        prefix = "Last Week"
    else:
        first_day = (week - 1) * 7 + 1
        if first_day > total_days:
            return None
        last_day = min(week * 7, total_days)
        prefix = f"Week {week}"

    return Period(
        datetime(year, month, first_day),
        end_of_day(datetime(year, month, last_day)),
        f"{prefix} of {month_name(month)} {year}",
        PeriodKind.WEEK_OF_MONTH,
    )


def _default_year(month: int, now: datetime) -> int:
    # A month later than the current one means last year's occurrence.
    return now.year - 1 if month > now.month else now.year


def _valid_year(year: int) -> bool:
    return MIN_YEAR <= year <= MAX_YEAR


def _parse_month(text: str) -> int | None:
    if text.isdigit():
        month = int(text)
        return month if 1 <= month <= 12 else None
    return _MONTHS.get(text)


# Relative keywords


def _today(now: datetime) -> Period:
    return Period(start_of_day(now), end_of_day(now), "Today", PeriodKind.TODAY)


def _yesterday(now: datetime) -> Period:
    day = now - timedelta(days=1)
    return Period(start_of_day(day), end_of_day(day), "Yesterday", PeriodKind.RELATIVE)


def _trailing_days(days: int, label: str) -> Callable[[datetime], Period]:
    def build(now: datetime) -> Period:
        return Period(now - timedelta(days=days), now, label, PeriodKind.RELATIVE)

    return build


def _trailing_months(months: int, label: str) -> Callable[[datetime], Period]:
    def build(now: datetime) -> Period:
        return Period(start_of_day(add_months(now, -months)), now, label, PeriodKind.RELATIVE)

    return build


def _last_week(now: datetime) -> Period:
    # Weeks run Sunday to Saturday; weekday() counts from Monday.
    days_since_sunday = (now.weekday() + 1) % 7
    this_sunday = start_of_day(now - timedelta(days=days_since_sunday))
    return Period(
        this_sunday - timedelta(days=7),
        end_of_day(this_sunday - timedelta(days=1)),
        "Last Week",
        PeriodKind.RELATIVE,
    )


def _this_month(now: datetime) -> Period:
    return Period(start_of_day(now.replace(day=1)), now, "This Month", PeriodKind.RELATIVE)


def _last_month(now: datetime) -> Period:
    previous = add_months(now.replace(day=1), -1)
    return replace(
        calendar_month_period(previous.year, previous.month), label="Last Month", kind=PeriodKind.RELATIVE
    )


def _this_year(now: datetime) -> Period:
    return Period(datetime(now.year, 1, 1), now, "This Year", PeriodKind.RELATIVE)


def _last_year(now: datetime) -> Period:
    return replace(calendar_year_period(now.year - 1), label="Last Year", kind=PeriodKind.RELATIVE)


def _all_time(now: datetime) -> Period:
    return ALL_TIME


RELATIVE_KEYWORDS: dict[str, Callable[[datetime], Period]] = {
    "today": _today,
    "yesterday": _yesterday,
    "week": _trailing_days(7, "Last 7 Days"),
    "this_week": _trailing_days(7, "Last 7 Days"),
    "last_7_days": _trailing_days(7, "Last 7 Days"),
    "last_week": _last_week,
    "previous_week": _last_week,
    "month": _this_month,
    "this_month": _this_month,
    "last_month": _last_month,
    "previous_month": _last_month,
    "last_3_months": _trailing_months(3, "Last 3 Months"),
    "last_6_months": _trailing_months(6, "Last 6 Months"),
    "year": _this_year,
    "this_year": _this_year,
    "last_year": _last_year,
    "previous_year": _last_year,
    "last_30_days": _trailing_days(30, "Last 30 Days"),
    "last_90_days": _trailing_days(90, "Last 90 Days"),
    "all": _all_time,
    "all_time": _all_time,
}


# Matchers, tried in order


def _match_relative(token: str, now: datetime) -> Period | None:
    build = RELATIVE_KEYWORDS.get(token)
    return build(now) if build else None


def _match_week_of_month(token: str, now: datetime) -> Period | None:
    for pattern in _WEEK_PATTERNS:
        match = pattern.fullmatch(token)
        if not match:
            continue
        month = _MONTHS[match.group("month")]
        week = _SELECTORS[match.group("sel")]
        if match.group("year"):
            year = int(match.group("year"))
            if not _valid_year(year):
                return None
        else:
            year = _default_year(month, now)
        return week_of_month_period(year, month, week)
    return None


def _match_month_year(token: str, now: datetime) -> Period | None:
    for pattern in _MONTH_YEAR_PATTERNS:
        match = pattern.fullmatch(token)
        if not match:
            continue
        month = _parse_month(match.group("month"))
        year = int(match.group("year"))
        if month is None or not _valid_year(year):
            return None
        return calendar_month_period(year, month)
    return None


def _match_year(token: str, now: datetime) -> Period | None:
    if not _YEAR_PATTERN.fullmatch(token):
        return None
    year = int(token)
    return calendar_year_period(year) if _valid_year(year) else None


def _match_month_name(token: str, now: datetime) -> Period | None:
    match = _MONTH_PATTERN.fullmatch(token)
    if not match:
        return None
    month = _MONTHS[match.group("month")]
    return calendar_month_period(_default_year(month, now), month)


MATCHERS: tuple[Callable[[str, datetime], Period | None], ...] = (
    _match_relative,
    _match_week_of_month,
    _match_month_year,
    _match_year,
    _match_month_name,
)


def resolve_period(token: str | None, today: datetime | date | None = None) -> Period:
    """
    Resolve a free-form period token to a Period.

    Args:
        token: Period token such as "last_month", "week 2 november 2024",
               "2024", "november"; None or empty means All Time
        today: Reference "now" (default: datetime.now())

    Returns:
        Resolved Period; unrecognized tokens resolve to All Time

    Raises:
        TypeError: If token is neither a string nor None

    Examples:
        resolve_period("2024").label -> "Year 2024"
        resolve_period("week_1_november_2024").label -> "Week 1 of November 2024"
        resolve_period("not_a_real_token").label -> "All Time"
    """
    if token is None:
        return ALL_TIME
    if not isinstance(token, str):
        raise TypeError(f"Period token must be a string, got {type(token).__name__}")

    if today is None:
        now = datetime.now()
    elif isinstance(today, datetime):
        now = today
    else:
        now = datetime.combine(today, time())

    normalized = normalize_token(token)
    if not normalized:
        return ALL_TIME

    for matcher in MATCHERS:
        # A None result means "not mine": move on to the next matcher.
        period = matcher(normalized, now)
        if period is not None:
            logger.debug("Resolved period %r to %s", token, period.label)
            return period

    logger.debug("Unrecognized period %r, using All Time", token)
    return ALL_TIME


def month_filter_period(
    month: int | None = None,
    year: int | None = None,
    all_records: bool = False,
    today: datetime | date | None = None,
) -> Period:
    """
    Period for raw dataset listings: one calendar month, or All Time.

    Month and year default to the current ones.
    """
    if all_records:
        return ALL_TIME
    reference = today or date.today()
    return calendar_month_period(year or reference.year, month or reference.month)
