"""
Sorted-set backend adapter.

Thin layer over an async Redis client issuing exactly one command per
call. Any RedisError raised once a command is in flight is re-raised as
TransportError; nothing is retried here.
"""

import logging
import math
from typing import List, Mapping, Union

from redis.asyncio import Redis
from redis.exceptions import RedisError

from redis_zset_ts.errors import TransportError
from redis_zset_ts.observability.metrics import track_command

logger = logging.getLogger(__name__)

NEG_INF = "-inf"
POS_INF = "+inf"

ScoreBound = Union[float, int, str]


def format_score(score: ScoreBound) -> str:
    """
    Render a score bound the way Redis expects it.

    Infinite floats become ``-inf`` / ``+inf`` and finite ones use ``repr``
    so no precision is lost. Strings are passed through untouched, which
    allows Redis' own syntax such as ``(2.5`` for an exclusive bound.
    """
    if isinstance(score, str):
        return score
    value = float(score)
    if math.isinf(value):
        return POS_INF if value > 0 else NEG_INF
    return repr(value)


def exclusive(score: float) -> str:
    """Render an exclusive score bound (``(score``)."""
    return f"({format_score(score)}"


class SortedSetBackend:
    """
    Issues sorted-set commands against a Redis connection.

    Args:
        client: Connected ``redis.asyncio.Redis`` instance; must return bytes
            (``decode_responses=False``)
    """

    def __init__(self, client: Redis):
        self.client = client

    @track_command("PING")
    async def ping(self) -> bool:
        try:
            return await self.client.ping()
        except RedisError as e:
            logger.error(f"PING failed: {e}")
            raise TransportError(f"Ping failed: {e}") from e

    @track_command("ZADD")
    async def add(self, key: str, mapping: Mapping[bytes, float]) -> int:
        """
        Add or update members with their scores in a single ZADD.

        Args:
            key: Sorted-set key
            mapping: Member bytes to score

        Returns:
            Number of members newly added (updates are not counted)
        """
        try:
            added = await self.client.zadd(key, dict(mapping))
            logger.debug(f"ZADD {key}: {len(mapping)} member(s), {added} new")
            return added
        except RedisError as e:
            logger.error(f"ZADD on '{key}' failed: {e}")
            raise TransportError(f"Insert into '{key}' failed: {e}") from e

    @track_command("ZRANGEBYSCORE")
    async def range_by_score(
        self, key: str, low: ScoreBound, high: ScoreBound
    ) -> List[bytes]:
        """Get members with ``low <= score <= high``, ascending by score."""
        low_arg, high_arg = format_score(low), format_score(high)
        try:
            members = await self.client.zrangebyscore(key, low_arg, high_arg)
            logger.debug(f"ZRANGEBYSCORE {key} {low_arg} {high_arg}: {len(members)} member(s)")
            return members
        except RedisError as e:
            logger.error(f"ZRANGEBYSCORE on '{key}' failed: {e}")
            raise TransportError(f"Range query on '{key}' failed: {e}") from e

    @track_command("ZREMRANGEBYSCORE")
    async def remove_range_by_score(
        self, key: str, low: ScoreBound, high: ScoreBound
    ) -> int:
        """Remove members with scores in the given range; returns the count removed."""
        low_arg, high_arg = format_score(low), format_score(high)
        try:
            removed = await self.client.zremrangebyscore(key, low_arg, high_arg)
            logger.debug(f"ZREMRANGEBYSCORE {key} {low_arg} {high_arg}: {removed} removed")
            return removed
        except RedisError as e:
            logger.error(f"ZREMRANGEBYSCORE on '{key}' failed: {e}")
            raise TransportError(f"Range removal on '{key}' failed: {e}") from e

    @track_command("ZCOUNT")
    async def count(self, key: str, low: ScoreBound, high: ScoreBound) -> int:
        try:
            return await self.client.zcount(key, format_score(low), format_score(high))
        except RedisError as e:
            logger.error(f"ZCOUNT on '{key}' failed: {e}")
            raise TransportError(f"Count on '{key}' failed: {e}") from e

    @track_command("DEL")
    async def delete(self, key: str) -> bool:
        """Delete the whole key. Returns True if it existed."""
        try:
            deleted = await self.client.delete(key)
            logger.debug(f"DEL {key}: {deleted}")
            return deleted > 0
        except RedisError as e:
            logger.error(f"DEL on '{key}' failed: {e}")
            raise TransportError(f"Delete of '{key}' failed: {e}") from e

    async def close(self) -> None:
        """Release the client's connection pool."""
        await self.client.aclose()
