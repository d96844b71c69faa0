"""
Unit tests for TimeValue.

Run with: pytest tests/test_types.py -v
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from redis_zset_ts import TimeValue
from redis_zset_ts import timestamp as ts


def test_time_value_from_tuple():
    tv = TimeValue.from_tuple((0.0, 42))
    assert tv.timestamp == 0.0
    assert tv.value == 42

    assert tv.as_tuple() == (0.0, 42)


def test_time_value_int_timestamp_becomes_float():
    tv = TimeValue(timestamp=3, value="x")
    assert isinstance(tv.timestamp, float)


def test_time_value_datetime_timestamp():
    dt = datetime(2024, 1, 1, tzinfo=timezone.utc)
    tv = TimeValue(timestamp=dt, value=1)
    assert tv.timestamp == ts.from_time(dt)
    assert tv.time == dt


def test_time_value_now():
    before = ts.now()
    tv = TimeValue.now("hello")
    assert tv.timestamp >= before
    assert tv.value == "hello"


def test_time_value_is_immutable():
    tv = TimeValue(timestamp=1.0, value=1)
    with pytest.raises(ValidationError):
        tv.value = 2


def test_time_value_rejects_bad_timestamp():
    with pytest.raises(ValidationError):
        TimeValue(timestamp="soon", value=1)


def test_time_value_equality():
    assert TimeValue(timestamp=1.0, value=[1]) == TimeValue(timestamp=1.0, value=[1])
    assert TimeValue(timestamp=1.0, value=[1]) != TimeValue(timestamp=2.0, value=[1])
