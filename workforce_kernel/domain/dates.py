"""
Calendar helpers (``workforce_kernel.domain.dates``).

All day arithmetic is done on calendar dates (``datetime.date``), which
carry no timezone, so spans never drift across daylight-saving changes.
ISO ``YYYY-MM-DD`` strings are accepted wherever a date is.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime

from workforce_kernel.exceptions import InvalidDateRangeError, ValidationFailedError

DateLike = date | str

_MONTH_LOOKUP: dict[str, int] = {}
for _number in range(1, 13):
    _MONTH_LOOKUP[calendar.month_name[_number].lower()] = _number
    _MONTH_LOOKUP[calendar.month_abbr[_number].lower()] = _number


def to_date(value: DateLike, field: str = "date") -> date:
    """Coerce a date or ISO date string to ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError) as exc:
        raise ValidationFailedError(f"Invalid {field}: {value!r}") from exc


def days_between(start: DateLike, end: DateLike) -> int:
    """Inclusive calendar-day count between two dates.

    ``days_between("2024-06-10", "2024-06-12") == 3``.

    Raises:
        InvalidDateRangeError: end precedes start.
    """
    start_date = to_date(start, "start_date")
    end_date = to_date(end, "end_date")
    if end_date < start_date:
        raise InvalidDateRangeError(start_date.isoformat(), end_date.isoformat())
    return (end_date - start_date).days + 1


def days_in_month(value: DateLike) -> int:
    """Number of calendar days in the month containing ``value``."""
    d = to_date(value)
    return calendar.monthrange(d.year, d.month)[1]


def month_number(month: str) -> int | None:
    """1-12 for an English month name or abbreviation, else None."""
    if not isinstance(month, str):
        return None
    return _MONTH_LOOKUP.get(month.strip().lower())


def month_name(number: int) -> str:
    """English month name, e.g. ``month_name(6) == "June"``."""
    return calendar.month_name[number]


def period_label(value: DateLike) -> str:
    """Human-readable month/year label, e.g. ``"June 2024"``."""
    d = to_date(value)
    return f"{month_name(d.month)} {d.year}"
