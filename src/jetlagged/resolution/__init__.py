"""Flight matching and outcome classification."""

from jetlagged.resolution.matching import (
    InvalidScheduleError,
    classify_outcome,
    extract_query_date,
    match_flight,
    parse_scheduled_time,
    resolve_records,
)

__all__ = [
    "InvalidScheduleError",
    "classify_outcome",
    "extract_query_date",
    "match_flight",
    "parse_scheduled_time",
    "resolve_records",
]
