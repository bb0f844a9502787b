"""
Collector: turns CLI inputs into an ordered daily report.

Range mode collects GitHub activity for one date range. Notes mode starts from a parsed
daily-note dump and only asks GitHub about the weekdays that have no note.
"""
import logging
from typing import Dict, Iterable, List, Tuple, Union

from correlate.aggregator import ActivityAggregator
from dates.days import DateLike, adjust_for_remote_day_boundary
from dates.gaps import weekdays_in_month, find_gap_ranges
from normalize.models import ActivityDay, NoteDay
from notes.parser import Notes
from notes.vocabulary import MONTHS

logger = logging.getLogger(__name__)

DailyReport = Dict[str, Union[NoteDay, ActivityDay]]


async def collect_range(aggregator: ActivityAggregator, tz_name: str, start: DateLike, end: DateLike) -> DailyReport:
    """Collect activity from start through end (local days in tz_name)."""
    date_range = adjust_for_remote_day_boundary(tz_name, start, end)
    buckets = await aggregator.collect(date_range)
    return {key: ActivityDay(bucket) for key, bucket in buckets.items()}


def plan_note_gaps(notes: Notes, months: Iterable[str] = MONTHS) -> List[Tuple[str, str, List[List[str]]]]:
    """Return (year, month, gap runs) for every month to fill in, newest month first.

    Within a year every month from the earliest to the latest month present in the notes is
    covered, including months with no notes at all.
    """
    month_order = list(months)
    plan = []
    for year in sorted(notes, reverse=True):
        present = sorted((m for m in notes[year] if m in month_order), key=month_order.index)
        if not present:
            continue
        first, last = month_order.index(present[0]), month_order.index(present[-1])
        for month in reversed(month_order[first:last + 1]):
            known = notes[year].get(month, {}).keys()
            runs = find_gap_ranges(known, weekdays_in_month(year, month))
            plan.append((year, month, runs))
    return plan


def notes_to_days(notes: Notes) -> DailyReport:
    return {
        day_key: NoteDay(day_key, text)
        for months in notes.values()
        for days in months.values()
        for day_key, text in days.items()
    }


async def collect_with_notes(aggregator: ActivityAggregator, tz_name: str, notes: Notes) -> DailyReport:
    """Merge the notes with GitHub activity for the weekdays they leave uncovered.

    Each gap run is collected with one aggregator call, one run at a time. A day present in both
    sources keeps its note.
    """
    merged = notes_to_days(notes)
    for year, month, runs in plan_note_gaps(notes):
        for run in runs:
            date_range = adjust_for_remote_day_boundary(tz_name, run[0], run[-1])
            buckets = await aggregator.collect(date_range)
            for day_key, bucket in buckets.items():
                merged.setdefault(day_key, ActivityDay(bucket))
        logger.info("Finished gathering all data for %s, %s", month, year)
    return dict(sorted(merged.items()))
