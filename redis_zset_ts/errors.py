"""
Exception hierarchy for redis-zset-ts.

Every failure surfaced by the library derives from TimeSeriesError so
callers can catch the whole family at once, or a single stage
(construction, encoding, transport, decoding) when they need to.
"""


class TimeSeriesError(Exception):
    """Base exception for time series operations."""

    pass


class ConnectionError(TimeSeriesError):
    """
    Exception for failures while building a TimeSeries handle.

    Raised when the backend is unreachable, the host/URI is malformed,
    or the namespace/name pair does not produce a usable key.
    """

    pass


class EncodeError(TimeSeriesError):
    """Exception when a value cannot be serialized into a member."""

    pass


class DecodeError(TimeSeriesError):
    """Exception when stored bytes do not match the member schema."""

    pass


class TransportError(TimeSeriesError):
    """Exception when a command fails after being sent to the backend."""

    pass
