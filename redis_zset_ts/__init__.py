"""
Simple time series storage on top of Redis sorted sets.

Points are stored as members of a sorted set whose score is the point's
timestamp, so range queries and purges map directly onto ZRANGEBYSCORE
and ZREMRANGEBYSCORE.
"""

from redis_zset_ts.codec import (
    Codec,
    FunctionSerializer,
    ModelSerializer,
    PassthroughSerializer,
    ValueSerializer,
    decode,
    encode,
)
from redis_zset_ts.config import RedisSettings, make_key
from redis_zset_ts.errors import (
    ConnectionError,
    DecodeError,
    EncodeError,
    TimeSeriesError,
    TransportError,
)
from redis_zset_ts.series import TimeSeries
from redis_zset_ts.timestamp import from_time, now, to_time, with_resolution
from redis_zset_ts.types import TimeValue

__version__ = "0.1.0"

__all__ = [
    # Series
    "TimeSeries",
    "TimeValue",
    # Timestamps
    "now",
    "from_time",
    "to_time",
    "with_resolution",
    # Codec
    "Codec",
    "ValueSerializer",
    "PassthroughSerializer",
    "ModelSerializer",
    "FunctionSerializer",
    "encode",
    "decode",
    # Configuration
    "RedisSettings",
    "make_key",
    # Exceptions
    "TimeSeriesError",
    "ConnectionError",
    "EncodeError",
    "DecodeError",
    "TransportError",
]
