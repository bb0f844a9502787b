"""
Correlate package: cross-reference GitHub results and bucket them per day.
"""

from .aggregator import ActivityAggregator, DataInconsistencyError
from .bucketing import bucket_by_day

__all__ = ["ActivityAggregator", "DataInconsistencyError", "bucket_by_day"]
