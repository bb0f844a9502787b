"""
Calendar-day helpers.
Day keys are ``YYYY-MM-DD`` strings; GitHub search timestamps are ``YYYY-MM-DDTHH:MM:SS+HH:MM``.
"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import List, Union
from zoneinfo import ZoneInfo, available_timezones

from dateutil import parser as date_parser

from normalize.models import DateRange

DateLike = Union[str, date, datetime]

LOOKBACK_DAYS = 14


class InvalidDateError(ValueError):
    """Raised when a value cannot be read as a date."""


def parse_date(value: DateLike) -> datetime:
    """Parse a string, date or datetime into a datetime, keeping any UTC offset it carries."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"{value!r} is not a valid date")
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as ex:
        raise InvalidDateError(f"{value!r} is not a valid date") from ex


def days_between(start: DateLike, end: DateLike) -> List[date]:
    """Return the calendar days strictly after start's day and strictly before end's day.

    Each endpoint is read in its own frame, so ``2021-06-01T00:00:00-07:00`` is June 1st
    regardless of the machine timezone.
    """
    first = parse_date(start).date()
    last = parse_date(end).date()
    days: List[date] = []
    current = first + timedelta(days=1)
    while current < last:
        days.append(current)
        current += timedelta(days=1)
    return days


def is_weekday(value: DateLike) -> bool:
    return parse_date(value).weekday() < 5


@lru_cache(maxsize=1)
def _known_timezones() -> frozenset:
    return frozenset(available_timezones())


def is_valid_timezone(name: str) -> bool:
    """True iff name is an IANA timezone identifier known to zoneinfo."""
    if not isinstance(name, str) or not name:
        return False
    return name in _known_timezones()


def format_remote_timestamp(value: datetime) -> str:
    return value.isoformat(timespec='seconds')


def adjust_for_remote_day_boundary(tz_name: str, start_date: DateLike, end_date: DateLike) -> DateRange:
    """Turn local calendar days into the instants GitHub search expects.

    start_date becomes 00:00:00 local, end_date 23:59:59 local, and two_weeks_before is local
    midnight fourteen days before the start.
    """
    zone = ZoneInfo(tz_name)
    start_day = parse_date(start_date).date()
    end_day = parse_date(end_date).date()
    start_local = datetime.combine(start_day, time(0, 0, 0), tzinfo=zone)
    end_local = datetime.combine(end_day, time(23, 59, 59), tzinfo=zone)
    lookback_local = datetime.combine(start_day - timedelta(days=LOOKBACK_DAYS), time(0, 0, 0), tzinfo=zone)
    return DateRange(
        start_date=format_remote_timestamp(start_local),
        end_date=format_remote_timestamp(end_local),
        two_weeks_before=format_remote_timestamp(lookback_local),
    )


def format_day_key(value: DateLike) -> str:
    return parse_date(value).date().isoformat()


def local_day_key(timestamp: DateLike, tz_name: str) -> str:
    """Day key of an instant as seen from tz_name. Naive timestamps are taken as UTC."""
    moment = parse_date(timestamp)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).date().isoformat()


def today_key(tz_name: str) -> str:
    return datetime.now(ZoneInfo(tz_name)).date().isoformat()


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')
    return f"{day}{suffix}"


def format_activity_heading(day_key: str) -> str:
    """``2021-06-01`` -> ``JUN 1ST 2021``"""
    day = parse_date(day_key).date()
    return f"{day.strftime('%b')} {ordinal(day.day)} {day.year}".upper()


def format_note_heading(day_key: str) -> str:
    """``2021-06-01`` -> ``Jun 1st 2021 Tuesday``"""
    day = parse_date(day_key).date()
    return f"{day.strftime('%b')} {ordinal(day.day)} {day.year} {day.strftime('%A')}"
