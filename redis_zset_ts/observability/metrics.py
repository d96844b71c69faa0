"""
Prometheus metrics for redis-zset-ts.

Metrics live on a dedicated registry so that importing the library never
pollutes an application's default registry. Expose them with
``get_metrics()`` or by adding ``metrics_registry`` to your own exporter.
"""

import time
from functools import wraps
from typing import Callable

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

metrics_registry = CollectorRegistry()


# ============================================================================
# Command Metrics
# ============================================================================

command_counter = Counter(
    "zset_ts_commands_total",
    "Total number of sorted-set commands issued",
    ["command", "status"],  # status: success, failure
    registry=metrics_registry,
)

command_duration = Histogram(
    "zset_ts_command_duration_seconds",
    "Sorted-set command duration in seconds",
    ["command"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=metrics_registry,
)

# ============================================================================
# Point Metrics
# ============================================================================

points_written_counter = Counter(
    "zset_ts_points_written_total",
    "Total number of points submitted to time series",
    registry=metrics_registry,
)

points_read_counter = Counter(
    "zset_ts_points_read_total",
    "Total number of points decoded from range queries",
    registry=metrics_registry,
)

points_purged_counter = Counter(
    "zset_ts_points_purged_total",
    "Total number of points removed by purges",
    registry=metrics_registry,
)


def track_command(command: str):
    """
    Decorator recording count, outcome and latency of a backend command.

    Args:
        command: Redis command name (ZADD, ZRANGEBYSCORE, ...)

    Example:
        @track_command("ZADD")
        async def add(self, key, mapping):
            ...
    """

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            status = "failure"

            try:
                result = await func(*args, **kwargs)
                status = "success"
                return result

            finally:
                command_duration.labels(command=command).observe(
                    time.perf_counter() - start_time
                )
                command_counter.labels(command=command, status=status).inc()

        return wrapper

    return decorator


def get_metrics() -> bytes:
    """Get the library's metrics in Prometheus text format."""
    return generate_latest(metrics_registry)
