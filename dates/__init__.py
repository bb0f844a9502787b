"""
Calendar helpers: day enumeration, timezone day boundaries and month gap ranges.
"""

from .days import InvalidDateError, days_between, is_weekday, is_valid_timezone, adjust_for_remote_day_boundary
from .gaps import weekdays_in_month, find_gap_ranges

__all__ = [
    "InvalidDateError",
    "days_between",
    "is_weekday",
    "is_valid_timezone",
    "adjust_for_remote_day_boundary",
    "weekdays_in_month",
    "find_gap_ranges",
]
