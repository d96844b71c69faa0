"""
Integration tests against a real Redis server.

Requirements:
- Redis reachable at $REDIS_TEST_URL (e.g. redis://localhost:6379/15)

Run with: REDIS_TEST_URL=redis://localhost:6379/15 pytest tests/test_redis_integration.py -v
"""

import math
import os
import uuid

import pytest
import pytest_asyncio

from redis_zset_ts import ConnectionError, TimeSeries, TimeValue

REDIS_TEST_URL = os.getenv("REDIS_TEST_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not REDIS_TEST_URL, reason="REDIS_TEST_URL not set"),
]

NAMESPACE = "redis-zset-ts-test"


@pytest_asyncio.fixture
async def series():
    """Open a uniquely named series and remove it afterwards."""
    series = await TimeSeries.with_uri(REDIS_TEST_URL, NAMESPACE, uuid.uuid4().hex)
    yield series
    await series.delete()
    await series.close()


@pytest.mark.asyncio
async def test_range_inclusivity(series):
    await series.add(100.0, "a")
    await series.add(200.0, "b")
    await series.add(300.0, "c")

    assert [p.value for p in await series.get_range(100.0, 300.0)] == ["a", "b", "c"]
    assert [p.value for p in await series.get_range(100.0, 200.0)] == ["a", "b"]
    assert [p.value for p in await series.get_range(150.0, 250.0)] == ["b"]


@pytest.mark.asyncio
async def test_unbounded_query_is_ascending(series):
    await series.add_multiple_values([(3.5, 3), (-1.25, -1), (0.000001, 0)])

    points = await series.get_range_any(-math.inf, math.inf)
    assert [p.timestamp for p in points] == [-1.25, 0.000001, 3.5]


@pytest.mark.asyncio
async def test_purge_boundary(series):
    await series.add(10.0, "a")
    await series.add(20.0, "b")
    await series.add(30.0, "c")

    assert await series.purge(20.0) == 1
    assert [p.timestamp for p in await series.get_all()] == [20.0, 30.0]


@pytest.mark.asyncio
async def test_batch_cardinality(series):
    await series.add_multiple(TimeValue(timestamp=i * 0.5, value={"i": i}) for i in range(100))

    assert len(await series.get_all()) == 100
    assert await series.count() == 100


@pytest.mark.asyncio
async def test_exact_collision_stores_one_point(series):
    await series.add(5.0, [1, 2])
    await series.add(5.0, [1, 2])

    assert len(await series.get_all()) == 1


@pytest.mark.asyncio
async def test_delete_then_reuse(series):
    await series.add(1.0, 1)

    assert await series.delete() is True
    assert await series.get_all() == []

    await series.add(2.0, 2)
    assert [p.value for p in await series.get_all()] == [2]


@pytest.mark.asyncio
async def test_unreachable_port_raises_connection_error():
    with pytest.raises(ConnectionError):
        await TimeSeries.with_uri("redis://127.0.0.1:1/0", NAMESPACE, "nowhere", socket_connect_timeout=1)
