"""Attendance Module -- daily check-in / check-out records."""

from workforce_modules.attendance.helpers import hours_between, parse_clock_time
from workforce_modules.attendance.service import AttendanceService

__all__ = ["AttendanceService", "hours_between", "parse_clock_time"]
