"""
Assign activity entities to per-day buckets in the report timezone.
"""
import logging
from typing import Dict, Iterable, List

from dates.days import days_between, format_day_key, local_day_key
from normalize.models import DateRange, DayBucket, Issue, Review, Comment, Commit

logger = logging.getLogger(__name__)


def day_keys_for_range(date_range: DateRange) -> List[str]:
    """Day keys from the start day through the end day, both inclusive, ascending."""
    keys = [format_day_key(date_range.start_date)]
    keys.extend(d.isoformat() for d in days_between(date_range.start_date, date_range.end_date))
    keys.append(format_day_key(date_range.end_date))
    # start and end may be the same day
    return list(dict.fromkeys(keys))


def _assign(buckets: Dict[str, DayBucket], items: Iterable, timestamp_attr: str, field: str, tz_name: str):
    for item in items:
        timestamp = getattr(item, timestamp_attr)
        if not timestamp:
            # pending reviews have no submitted_at
            logger.debug("Dropping %s without a %s", field, timestamp_attr)
            continue
        key = local_day_key(timestamp, tz_name)
        bucket = buckets.get(key)
        if bucket is None:
            # only clock skew between the local window and GitHub's matching lands here
            logger.debug("Dropping %s dated %s outside the requested range", field, key)
            continue
        getattr(bucket, field).append(item)


def bucket_by_day(
    date_range: DateRange,
    tz_name: str,
    issues: List[Issue],
    reviews: List[Review],
    comments: List[Comment],
    commits: List[Commit],
) -> Dict[str, DayBucket]:
    """Return {day key: DayBucket} for every day of the range, in ascending order.

    Each entity lands in the bucket of its local calendar day, or nowhere when that day is out of
    range. Entities keep the order they were given in.
    """
    buckets = {key: DayBucket(key) for key in day_keys_for_range(date_range)}
    _assign(buckets, issues, 'created_at', 'issues', tz_name)
    _assign(buckets, reviews, 'submitted_at', 'reviews', tz_name)
    _assign(buckets, comments, 'created_at', 'comments', tz_name)
    _assign(buckets, commits, 'authored_at', 'commits', tz_name)
    return buckets
