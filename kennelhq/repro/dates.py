"""Local calendar-date primitives for the repro engine.

Every date that crosses the engine boundary is a ``YYYY-MM-DD`` string with no
time or zone component.  Parsing decomposes the year/month/day components
directly so a value never shifts by a day when the caller sits west of UTC.
Inside the engine dates are plain ``datetime.date`` objects.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

__all__ = [
    "InvalidDate",
    "parse_local_date",
    "format_local_date",
    "as_local_date",
    "coerce_local_date",
    "add_days",
    "add_months",
    "days_between",
    "compare",
    "min_date",
    "max_date",
]


class InvalidDate(ValueError):
    """Raised when a date string cannot be decomposed into a calendar day."""


def parse_local_date(iso: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a calendar date.

    Args:
        iso: Date-only ISO text.  Surrounding whitespace is ignored.

    Returns:
        The calendar day named by the string.

    Raises:
        InvalidDate: If the text is not three dash-separated integers or names
            a day that does not exist (e.g. ``2023-02-29``).
    """
    if not isinstance(iso, str):
        raise InvalidDate(f"Expected YYYY-MM-DD text, got {iso!r}")

    parts = iso.strip().split("-")
    if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidDate(f"Expected YYYY-MM-DD, got {iso!r}")

    year, month, day = (int(p) for p in parts)
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDate(f"Not a calendar day: {iso!r} ({exc})") from exc


def format_local_date(d: date) -> str:
    """Render a date as zero-padded ``YYYY-MM-DD``."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def as_local_date(value: str) -> date:
    """Parse date-only text, tolerating a trailing time component.

    API payloads sometimes carry ``2024-03-01T00:00:00.000Z``.  Only the date
    prefix is meaningful; the time and zone are discarded, never applied.
    """
    if not isinstance(value, str):
        raise InvalidDate(f"Expected date text, got {value!r}")
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return parse_local_date(text)


def coerce_local_date(value: date | str | None) -> date | None:
    """Normalise an optional boundary value to ``date | None``.

    Empty strings are treated as absent.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    return as_local_date(value)


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_months(d: date, n: int) -> date:
    """Shift by ``n`` calendar months, clamping to the target month's last day."""
    month_index = d.month - 1 + n
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def days_between(a: date, b: date) -> int:
    """Signed number of days from ``a`` to ``b`` (negative when ``b`` is earlier)."""
    return (b - a).days


def compare(a: date, b: date) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def min_date(a: date, b: date) -> date:
    return a if a <= b else b


def max_date(a: date, b: date) -> date:
    return a if a >= b else b
