"""
Time series stored in a Redis sorted set.

Each point becomes one sorted-set member: the score is the point's
timestamp and the member is the MessagePack encoding of
``[timestamp, value]`` (see ``redis_zset_ts.codec``). Keeping the
timestamp inside the member means repeated values at different times
never collapse into one, and a range query returns everything needed to
rebuild the points without a second lookup.

Consistency notes:
- Every operation is a single Redis command. ``add_multiple`` sends one
  ZADD for the whole batch, but nothing here is transactional across
  commands.
- A ``purge(cutoff)`` racing an ``add`` below ``cutoff`` from another
  client may or may not remove the new point. Callers who need a
  guarantee must serialize those calls themselves.
- Points sharing a timestamp come back in Redis' byte order of the
  encoded member, not insertion order.
- Adding a point whose timestamp and value are both identical to an
  existing point stores nothing new.
"""

from datetime import datetime
from typing import Any, Generic, Iterable, List, Optional, Tuple, TypeVar, Union

from redis.asyncio import Redis

from redis_zset_ts import timestamp as ts_utils
from redis_zset_ts.backend import NEG_INF, POS_INF, ScoreBound, SortedSetBackend, exclusive
from redis_zset_ts.codec import Codec, ValueSerializer
from redis_zset_ts.config import (
    RedisSettings,
    build_host_uri,
    make_key,
    validate_uri,
)
from redis_zset_ts.errors import (
    ConnectionError,
    DecodeError,
    EncodeError,
    TimeSeriesError,
    TransportError,
)
from redis_zset_ts.observability.logging import get_logger
from redis_zset_ts.observability.metrics import (
    points_purged_counter,
    points_read_counter,
    points_written_counter,
)
from redis_zset_ts.timestamp import DurationLike, TimeLike
from redis_zset_ts.types import TimeValue

T = TypeVar("T")

RangeBound = Union[float, int, datetime, str, None]

_INFINITE_BOUNDS = {"-inf": NEG_INF, "+inf": POS_INF, "inf": POS_INF}


class TimeSeries(Generic[T]):
    """
    Handle to a single named time series.

    Use one of the async constructors (``new``, ``with_host``, ``with_uri``)
    to open a connection, or wrap an existing client directly. Handles
    that share a namespace and name read and write the same data.

    Example:
        async with await TimeSeries.new("sensors", "temperature") as series:
            await series.add_now(21.5)
            points = await series.get_last(3600)
    """

    def __init__(
        self,
        namespace: str,
        name: str,
        client: Redis,
        serializer: Optional[ValueSerializer[T]] = None,
    ):
        """
        Wrap an already connected Redis client.

        Args:
            namespace: Key prefix shared by related series (may be empty)
            name: Series name
            client: ``redis.asyncio.Redis`` returning bytes
            serializer: Value serializer; MessagePack-native values by default

        Raises:
            ConnectionError: If namespace and name do not form a valid key
        """
        self.namespace = namespace
        self.name = name
        self.key = make_key(namespace, name)
        self.codec: Codec[T] = Codec(serializer)
        self._backend = SortedSetBackend(client)
        self._closed = False
        self._logger = get_logger(__name__, series=self.key)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    async def new(
        cls,
        namespace: str,
        name: str,
        serializer: Optional[ValueSerializer[T]] = None,
        settings: Optional[RedisSettings] = None,
    ) -> "TimeSeries[T]":
        """
        Connect to the default Redis server.

        The default is ``redis://localhost:6379/0`` unless overridden by
        ``REDIS_URL`` / ``REDIS_*`` environment variables or ``settings``.
        """
        settings = settings if settings is not None else RedisSettings.from_env()
        return await cls.with_uri(
            settings.to_uri(),
            namespace,
            name,
            serializer=serializer,
            **settings.client_options(),
        )

    @classmethod
    async def with_host(
        cls,
        host: str,
        namespace: str,
        name: str,
        serializer: Optional[ValueSerializer[T]] = None,
        **client_options: Any,
    ) -> "TimeSeries[T]":
        """Connect to the Redis server on ``host`` (``"host"`` or ``"host:port"``)."""
        return await cls.with_uri(
            build_host_uri(host), namespace, name, serializer=serializer, **client_options
        )

    @classmethod
    async def with_uri(
        cls,
        uri: str,
        namespace: str,
        name: str,
        serializer: Optional[ValueSerializer[T]] = None,
        **client_options: Any,
    ) -> "TimeSeries[T]":
        """
        Connect using a full connection URI.

        Args:
            uri: ``redis://[[user]:password@]host[:port][/db]``, ``rediss://...``
                for TLS, or ``unix:///path/to/socket``
            namespace: Key prefix (may be empty)
            name: Series name
            serializer: Value serializer
            **client_options: Extra options for ``Redis.from_url``
                (socket_timeout, max_connections, ...)

        Returns:
            Connected TimeSeries handle

        Raises:
            ConnectionError: If the URI is malformed, the key is invalid,
                or the server does not answer PING
        """
        make_key(namespace, name)
        validate_uri(uri)

        # Members are raw MessagePack, never text
        client_options["decode_responses"] = False
        try:
            client = Redis.from_url(uri, **client_options)
        except ValueError as e:
            raise ConnectionError(f"Invalid Redis URI '{uri}': {e}") from e

        series = cls(namespace, name, client, serializer=serializer)
        try:
            await series._backend.ping()
        except TransportError as e:
            await client.aclose()
            raise ConnectionError(f"Cannot connect to Redis for '{series.key}': {e}") from e

        series._logger.info(f"Connected time series '{series.key}'")
        return series

    async def close(self) -> None:
        """Release the connection. The handle cannot be used afterwards."""
        if self._closed:
            return
        self._closed = True
        await self._backend.close()
        self._logger.info(f"Closed time series '{self.key}'")

    async def __aenter__(self) -> "TimeSeries[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise TimeSeriesError(f"Time series '{self.key}' is closed")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _encode(self, timestamp: TimeLike, value: T) -> Tuple[bytes, float]:
        try:
            score = ts_utils.to_timestamp(timestamp)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Invalid timestamp {timestamp!r}: {e}") from e
        return self.codec.encode(score, value), score

    async def add(self, timestamp: TimeLike, value: T) -> None:
        """
        Add a point to the series.

        Args:
            timestamp: Float seconds since the epoch, or a datetime
            value: Point value

        Raises:
            EncodeError: If the value cannot be serialized
            TransportError: If the ZADD fails
        """
        self._check_open()
        member, score = self._encode(timestamp, value)
        await self._backend.add(self.key, {member: score})
        points_written_counter.inc()

    async def add_now(self, value: T) -> None:
        """Add a point stamped with the current time."""
        await self.add(ts_utils.now(), value)

    async def add_value(self, time_value: Union[TimeValue[T], Tuple[TimeLike, T]]) -> None:
        """Add a point given as a TimeValue or a ``(timestamp, value)`` tuple."""
        if isinstance(time_value, TimeValue):
            await self.add(time_value.timestamp, time_value.value)
        else:
            timestamp, value = time_value
            await self.add(timestamp, value)

    async def add_multiple(self, time_values: Iterable[TimeValue[T]]) -> None:
        """
        Add many points with a single ZADD.

        Every point is encoded before anything is sent, so one bad value
        rejects the whole batch with nothing written. An empty batch sends
        no command.

        Raises:
            EncodeError: If any value cannot be serialized
            TransportError: If the ZADD fails
        """
        await self.add_multiple_values(tv.as_tuple() for tv in time_values)

    async def add_multiple_values(self, values: Iterable[Tuple[TimeLike, T]]) -> None:
        """Add many ``(timestamp, value)`` tuples with a single ZADD."""
        self._check_open()

        mapping = {}
        for timestamp, value in values:
            member, score = self._encode(timestamp, value)
            mapping[member] = score

        if not mapping:
            return

        await self._backend.add(self.key, mapping)
        points_written_counter.inc(len(mapping))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def _time_bound(bound: RangeBound, default: str) -> ScoreBound:
        if bound is None:
            return default
        if isinstance(bound, str):
            try:
                return _INFINITE_BOUNDS[bound.strip().lower()]
            except KeyError:
                raise ValueError(
                    f"Unsupported range bound '{bound}' (use a timestamp, '-inf' or '+inf')"
                ) from None
        return ts_utils.to_timestamp(bound)

    @staticmethod
    def _raw_bound(bound: RangeBound, default: str) -> ScoreBound:
        if bound is None:
            return default
        if isinstance(bound, datetime):
            return ts_utils.from_time(bound)
        return bound

    async def get_range(self, low: RangeBound, high: RangeBound) -> List[TimeValue[T]]:
        """
        Get the points with ``low <= timestamp <= high``.

        Both bounds are inclusive. Either bound may be a timestamp, a
        datetime, ``math.inf`` / ``-math.inf``, ``"-inf"`` / ``"+inf"``, or
        None for unbounded.

        Returns:
            Points in ascending timestamp order

        Raises:
            DecodeError: If any stored member cannot be decoded (no partial result)
            TransportError: If the query fails
        """
        return await self.get_range_any(
            self._time_bound(low, NEG_INF),
            self._time_bound(high, POS_INF),
        )

    async def get_range_any(
        self, low: RangeBound = NEG_INF, high: RangeBound = POS_INF
    ) -> List[TimeValue[T]]:
        """
        Get points between two raw score bounds.

        Accepts everything ``get_range`` does plus Redis bound syntax
        strings, e.g. ``"(2.0"`` for an exclusive bound. With no arguments
        it returns the whole series.
        """
        self._check_open()

        members = await self._backend.range_by_score(
            self.key, self._raw_bound(low, NEG_INF), self._raw_bound(high, POS_INF)
        )

        points = []
        for member in members:
            try:
                timestamp, value = self.codec.decode(member)
            except DecodeError as e:
                self._logger.error(f"Undecodable member in '{self.key}': {e}")
                raise DecodeError(f"Cannot decode point in '{self.key}': {e}") from e
            points.append(TimeValue(timestamp=timestamp, value=value))

        points_read_counter.inc(len(points))
        return points

    async def get_from(self, timestamp: TimeLike) -> List[TimeValue[T]]:
        """Get the points from ``timestamp`` (inclusive) up to the latest."""
        return await self.get_range(timestamp, POS_INF)

    async def get_last(self, duration: DurationLike) -> List[TimeValue[T]]:
        """Get the points from the most recent ``duration`` (seconds or timedelta)."""
        return await self.get_from(ts_utils.now() - ts_utils.to_seconds(duration))

    async def get_all(self) -> List[TimeValue[T]]:
        """Get every point in the series. Use with care on large series."""
        return await self.get_range_any(NEG_INF, POS_INF)

    async def count(self, low: RangeBound = None, high: RangeBound = None) -> int:
        """
        Count the points between two bounds without fetching them.

        Takes the same bounds as ``get_range_any``, so ``"(2.0"`` counts
        from 2.0 exclusive.
        """
        self._check_open()
        return await self._backend.count(
            self.key, self._raw_bound(low, NEG_INF), self._raw_bound(high, POS_INF)
        )

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    async def purge(self, cutoff: TimeLike) -> int:
        """
        Remove every point older than ``cutoff``.

        Points stamped exactly at ``cutoff`` are kept.

        Returns:
            Number of points removed
        """
        self._check_open()
        score = ts_utils.to_timestamp(cutoff)
        removed = await self._backend.remove_range_by_score(self.key, NEG_INF, exclusive(score))
        points_purged_counter.inc(removed)
        if removed:
            self._logger.info(f"Purged {removed} point(s) before {score} from '{self.key}'")
        return removed

    async def purge_older_than(self, duration: DurationLike) -> int:
        """Remove everything except the most recent ``duration`` of data."""
        return await self.purge(ts_utils.now() - ts_utils.to_seconds(duration))

    async def delete(self) -> bool:
        """
        Remove the whole series from Redis.

        The handle stays usable; a later ``add`` starts a fresh series.

        Returns:
            True if the key existed
        """
        self._check_open()
        deleted = await self._backend.delete(self.key)
        if deleted:
            self._logger.info(f"Deleted time series '{self.key}'")
        return deleted

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"TimeSeries(key={self.key!r}, {state})"
