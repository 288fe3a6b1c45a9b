"""
Wall-clock helpers for run timestamps.

Latency of individual orders is measured with time.perf_counter in the
worker pool; the functions here only stamp the start and end of phases.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def time_elapsed_seconds(start_time: datetime, end_time: Optional[datetime] = None) -> float:
    """
    Calculate elapsed time in seconds between two timestamps.

    Args:
        start_time: Start timestamp
        end_time: End timestamp, defaults to now

    Returns:
        Elapsed time in seconds
    """
    if end_time is None:
        end_time = utc_now()

    return (end_time - start_time).total_seconds()


def format_timestamp(ts: datetime) -> str:
    """ISO8601 form used in logs."""
    return ts.isoformat()
