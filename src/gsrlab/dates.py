"""Calendar date parsing and ISO key helpers.

Dates are plain :class:`datetime.date` values (local calendar days with no
time component), so two dates compare equal exactly when year, month and day
match. ISO keys ("YYYY-MM-DD") sort lexicographically in date order, which the
window selector relies on.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from dateutil import parser as date_parser

_DMY_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})$")
_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Two-digit years above this are 19xx, the rest 20xx.
YEAR_PIVOT = 50


def _expand_year(text: str) -> int:
    year = int(text)
    if len(text) == 2:
        return 1900 + year if year > YEAR_PIVOT else 2000 + year
    return year


def _rolled_date(year: int, month: int, day: int) -> date | None:
    """Build a date, carrying out-of-range months and days forward.

    Month 13 is January of the next year and 31/02 is early March.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def parse_flexible(value: Any) -> date | None:
    """Parse a human date string.

    Accepts ``D/M/Y`` or ``D-M-Y`` with one or two digit day and month and a
    two or four digit year, falling back to generic date parsing for anything
    else (ISO strings, "3 Jan 2020", ...). Out-of-range day or month values
    roll over into the following month or year, so "31/02/2021" is
    2021-03-03. A zero day or month is read as 1.

    :param value: Raw cell value.
    :returns: Parsed date, or None if the value is empty or not a valid date.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    match = _DMY_RE.match(text)
    if match:
        day = int(match.group(1)) or 1
        month = int(match.group(2)) or 1
        return _rolled_date(_expand_year(match.group(3)), month, day)

    try:
        default = datetime(date.today().year, 1, 1)
        return date_parser.parse(text, default=default).date()
    except (ValueError, OverflowError):
        return None


def to_key(value: date | datetime) -> str:
    """Format a date as its "YYYY-MM-DD" key."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def from_key(key: Any) -> date | None:
    """Parse a "YYYY-MM-DD" key; anything else (or an impossible date) is None."""
    if not isinstance(key, str):
        return None
    match = _KEY_RE.match(key)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def diff_years_months(start: date | None, end: date | None) -> tuple[int, int]:
    """Whole calendar months between two dates, split into (years, months).

    A month only counts once the end day-of-month reaches the start
    day-of-month. Negative spans clamp to zero.
    """
    if start is None or end is None:
        return 0, 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    months = max(0, months)
    return months // 12, months % 12


def format_duration(start: date | None, end: date | None) -> str:
    """Render a window length as "3y 2m", "5m", "1y" or "0m".

    Returns an empty string when either bound is missing.
    """
    if start is None or end is None:
        return ""
    years, months = diff_years_months(start, end)
    parts = []
    if years:
        parts.append(f"{years}y")
    if months:
        parts.append(f"{months}m")
    return " ".join(parts) or "0m"


def _clamp_int(value: Any, low: int, high: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if not math.isfinite(number):
        return low
    return min(high, max(low, math.trunc(number)))


def clamp_date_parts(day: Any, month: Any, year: Any) -> date:
    """Build a valid date from loosely typed day/month/year entries.

    Each part is clamped to its range (day 1-31, month 1-12, year 1900-2100,
    unreadable parts fall to the minimum) and the day is then capped at the
    length of the chosen month, so "31/02/2023" becomes 2023-02-28.
    """
    d = _clamp_int(day, 1, 31)
    m = _clamp_int(month, 1, 12)
    y = _clamp_int(year, 1900, 2100)
    last_day = calendar.monthrange(y, m)[1]
    return date(y, m, min(d, last_day))


__all__ = [
    "YEAR_PIVOT",
    "parse_flexible",
    "to_key",
    "from_key",
    "add_days",
    "diff_years_months",
    "format_duration",
    "clamp_date_parts",
]
