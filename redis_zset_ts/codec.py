"""
Member codec for time series points.

Each point is stored as a sorted-set member holding the MessagePack
encoding of a two-element array::

    [timestamp: float64, value]

The timestamp is always packed as a 64-bit float, strings as ``str`` and
byte strings as ``bin``, so any MessagePack implementation can read the
stored members back without this library. Because the timestamp is part
of the member, two points only collide when both timestamp and value are
identical.

How a value becomes MessagePack-friendly is delegated to a
``ValueSerializer``.
"""

from typing import Any, Callable, Generic, Optional, Protocol, Tuple, Type, TypeVar

import msgpack
from pydantic import BaseModel

from redis_zset_ts.errors import DecodeError, EncodeError
from redis_zset_ts.timestamp import TimeLike, to_timestamp

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


# ============================================================================
# Value Serializers
# ============================================================================


class ValueSerializer(Protocol[T]):
    """Converts values to and from MessagePack-native primitives."""

    def to_wire(self, value: T) -> Any:
        """Convert a value into something MessagePack can pack."""
        ...

    def from_wire(self, data: Any) -> T:
        """Rebuild a value from its unpacked form."""
        ...


class PassthroughSerializer:
    """
    Serializer for values that MessagePack handles natively.

    Covers None, bool, int, float, str, bytes, lists and dicts of those.
    Tuples come back as lists.
    """

    def to_wire(self, value: Any) -> Any:
        return value

    def from_wire(self, data: Any) -> Any:
        return data


class ModelSerializer(Generic[M]):
    """Serializer for pydantic models, stored as their JSON-mode dict."""

    def __init__(self, model: Type[M]):
        self.model = model

    def to_wire(self, value: M) -> Any:
        return value.model_dump(mode="json")

    def from_wire(self, data: Any) -> M:
        return self.model.model_validate(data)


class FunctionSerializer(Generic[T]):
    """Serializer built from a pair of plain functions."""

    def __init__(self, to_wire: Callable[[T], Any], from_wire: Callable[[Any], T]):
        self._to_wire = to_wire
        self._from_wire = from_wire

    def to_wire(self, value: T) -> Any:
        return self._to_wire(value)

    def from_wire(self, data: Any) -> T:
        return self._from_wire(data)


# ============================================================================
# Codec
# ============================================================================


class Codec(Generic[T]):
    """
    Encodes ``(timestamp, value)`` pairs to member bytes and back.

    Args:
        serializer: Value serializer; defaults to PassthroughSerializer
    """

    def __init__(self, serializer: Optional[ValueSerializer[T]] = None):
        self.serializer = serializer if serializer is not None else PassthroughSerializer()

    def encode(self, timestamp: TimeLike, value: T) -> bytes:
        """
        Encode a point into member bytes.

        Args:
            timestamp: Point timestamp (float seconds or datetime)
            value: Point value

        Returns:
            MessagePack bytes of ``[timestamp, value]``

        Raises:
            EncodeError: If the timestamp is invalid or the value cannot be serialized
        """
        try:
            ts = to_timestamp(timestamp)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Invalid timestamp {timestamp!r}: {e}") from e

        # Any exception raised by the serializer is reported as EncodeError
        try:
            wire_value = self.serializer.to_wire(value)
        except Exception as e:
            raise EncodeError(
                f"Serializer failed for value of type {type(value).__name__}: {e}"
            ) from e

        try:
            return msgpack.packb([ts, wire_value], use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncodeError(f"Cannot encode value of type {type(value).__name__}: {e}") from e

    def decode(self, data: bytes) -> Tuple[float, T]:
        """
        Decode member bytes into a ``(timestamp, value)`` pair.

        Raises:
            DecodeError: If the bytes are not a valid ``[float, value]`` array
                or the value does not match the serializer's schema
        """
        try:
            unpacked = msgpack.unpackb(data, raw=False, strict_map_key=False)
        except (ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
            raise DecodeError(f"Invalid member encoding: {e}") from e

        if not isinstance(unpacked, list) or len(unpacked) != 2:
            raise DecodeError(f"Expected a 2-element array, got {unpacked!r}")

        ts, wire_value = unpacked
        if isinstance(ts, bool) or not isinstance(ts, (int, float)):
            raise DecodeError(f"Expected a numeric timestamp, got {type(ts).__name__}")

        try:
            value = self.serializer.from_wire(wire_value)
        except Exception as e:
            raise DecodeError(f"Value does not match schema: {e}") from e

        return float(ts), value


_default_codec: Codec[Any] = Codec()


def encode(timestamp: TimeLike, value: Any) -> bytes:
    """Encode a MessagePack-native value with the default codec."""
    return _default_codec.encode(timestamp, value)


def decode(data: bytes) -> Tuple[float, Any]:
    """Decode member bytes with the default codec."""
    return _default_codec.decode(data)
