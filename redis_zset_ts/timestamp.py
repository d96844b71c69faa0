"""
Timestamp helpers.

A timestamp is a plain float holding seconds (with fraction) since the
UNIX epoch. It doubles as the sorted-set score, so it must stay a float
all the way to Redis. Values before the epoch are negative.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ONE_SECOND = timedelta(seconds=1)

TimeLike = Union[float, int, datetime]
DurationLike = Union[float, int, timedelta]


def from_time(dt: datetime) -> float:
    """
    Convert a datetime into a timestamp.

    Naive datetimes are taken to be UTC. The conversion is done in integer
    microseconds, so the result is exact to the microsecond.

    Args:
        dt: Point in time to convert

    Returns:
        Seconds since the epoch as a float
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) / _ONE_SECOND


def now() -> float:
    """Get the current wall-clock time as a timestamp (microsecond resolution)."""
    return from_time(datetime.now(timezone.utc))


def with_resolution(dt: datetime, resolution: DurationLike) -> float:
    """
    Convert a datetime into a timestamp rounded to a given resolution.

    Args:
        dt: Point in time to convert
        resolution: Step size, in seconds or as a timedelta
            (1e-3 for milliseconds, 1.0 for whole seconds, ...)

    Returns:
        Timestamp rounded to the nearest multiple of ``resolution``
    """
    res = to_seconds(resolution)
    if res <= 0:
        raise ValueError(f"Resolution must be positive, got {res}")
    return res * round(from_time(dt) / res)


def to_time(ts: float) -> datetime:
    """Convert a timestamp back into a UTC-aware datetime."""
    return EPOCH + timedelta(microseconds=round(ts * 1e6))


def to_timestamp(value: TimeLike) -> float:
    """
    Normalize a timestamp-like value into a float timestamp.

    Raises:
        TypeError: If the value is not a number or datetime
        ValueError: If the value is NaN
    """
    if isinstance(value, datetime):
        return from_time(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a timestamp or datetime, got {type(value).__name__}")
    ts = float(value)
    if math.isnan(ts):
        raise ValueError("Timestamp cannot be NaN")
    return ts


def to_seconds(duration: DurationLike) -> float:
    """Normalize a duration given as seconds or a timedelta."""
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)
