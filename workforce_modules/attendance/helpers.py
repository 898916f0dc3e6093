"""Clock-time arithmetic for attendance records."""

from __future__ import annotations

from datetime import datetime, time

from workforce_kernel.exceptions import InvalidClockTimeError


def parse_clock_time(value: str, field: str = "time") -> time:
    """Parse an ``HH:MM`` string.  ``"9:05"`` is accepted."""
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError) as exc:
        raise InvalidClockTimeError(field, value) from exc


def hours_between(check_in: str, check_out: str) -> float:
    """
    Hours from check-in to check-out on the same day, rounded to 2dp.

    A check-out at or before check-in yields 0.0, never a negative span.
    """
    start = parse_clock_time(check_in, "check_in")
    end = parse_clock_time(check_out, "check_out")
    minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    return round(max(0, minutes) / 60, 2)
