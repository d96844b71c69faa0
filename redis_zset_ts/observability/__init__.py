"""
Observability helpers: Prometheus metrics and structured logging.
"""

from redis_zset_ts.observability.logging import (
    JSONFormatter,
    SeriesLoggerAdapter,
    get_logger,
    setup_logging,
)
from redis_zset_ts.observability.metrics import (
    command_counter,
    command_duration,
    get_metrics,
    metrics_registry,
    points_purged_counter,
    points_read_counter,
    points_written_counter,
    track_command,
)

__all__ = [
    # Metrics
    "metrics_registry",
    "command_counter",
    "command_duration",
    "points_written_counter",
    "points_read_counter",
    "points_purged_counter",
    "track_command",
    "get_metrics",
    # Logging
    "JSONFormatter",
    "SeriesLoggerAdapter",
    "setup_logging",
    "get_logger",
]
