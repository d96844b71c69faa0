"""
Shared pytest fixtures.
"""

import pytest

from redis_zset_ts import TimeSeries
from tests.mocks import MockRedis

NAMESPACE = "redis-zset-ts"


@pytest.fixture
def mock_redis():
    """Create an empty in-memory Redis double."""
    return MockRedis()


@pytest.fixture
def series(mock_redis):
    """Create a TimeSeries bound to the in-memory double."""
    return TimeSeries(NAMESPACE, "test", mock_redis)
