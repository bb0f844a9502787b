"""
Gap ranges: the weekdays of a month that still lack a note, coalesced into contiguous runs so
each run costs one GitHub query instead of one query per day.
"""
import calendar
from datetime import date
from typing import Iterable, List, Union

from .days import parse_date, is_weekday


def _month_number(month: Union[int, str]) -> int:
    if isinstance(month, int):
        return month
    names = [name.lower() for name in calendar.month_name]
    try:
        return names.index(month.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown month: {month!r}") from None


def weekdays_in_month(year: Union[int, str], month: Union[int, str]) -> List[str]:
    """Sorted day keys of every Monday..Friday in the month. month may be a number or full name."""
    year_num = int(year)
    month_num = _month_number(month)
    _, days_in_month = calendar.monthrange(year_num, month_num)
    days = (date(year_num, month_num, d) for d in range(1, days_in_month + 1))
    return [d.isoformat() for d in days if is_weekday(d)]


def _extends_run(previous: date, current: date) -> bool:
    return previous.year == current.year and previous.month == current.month and current.day == previous.day + 1


def find_gap_ranges(known_days: Iterable[str], weekdays: Iterable[str]) -> List[List[str]]:
    """Return the missing weekdays grouped into maximal runs of consecutive days.

    missing = weekdays - known_days, sorted ascending. A day joins the current run only when it
    is the next day-of-month in the same month; weekends and month boundaries start a new run.
    """
    missing = sorted(set(weekdays) - set(known_days))
    runs: List[List[str]] = []
    previous = None
    for key in missing:
        current = parse_date(key).date()
        if previous is None or not _extends_run(previous, current):
            runs.append([])
        runs[-1].append(key)
        previous = current
    return runs
