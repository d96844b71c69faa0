"""
Shared type definitions for redis-zset-ts.
"""

from datetime import datetime
from typing import Any, Generic, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from redis_zset_ts import timestamp as ts_utils

T = TypeVar("T")


class TimeValue(BaseModel, Generic[T]):
    """
    A value along with the time at which it was created or collected.

    Instances are immutable. The timestamp is stored as float seconds since
    the epoch; datetimes are converted on the way in.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    timestamp: float
    value: T

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, v: Any) -> float:
        try:
            return ts_utils.to_timestamp(v)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def now(cls, value: T) -> "TimeValue[T]":
        """Create a value stamped with the current time."""
        return cls(timestamp=ts_utils.now(), value=value)

    @classmethod
    def from_tuple(cls, pair: Tuple[Any, T]) -> "TimeValue[T]":
        """Create a value from a ``(timestamp, value)`` tuple."""
        timestamp, value = pair
        return cls(timestamp=timestamp, value=value)

    def as_tuple(self) -> Tuple[float, T]:
        """Convert into a ``(timestamp, value)`` tuple."""
        return (self.timestamp, self.value)

    @property
    def time(self) -> datetime:
        """The timestamp as a UTC-aware datetime."""
        return ts_utils.to_time(self.timestamp)
