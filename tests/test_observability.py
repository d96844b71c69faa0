"""
Tests for observability components (metrics and logging).

Run with: pytest tests/test_observability.py -v
"""

import json
import logging
import os
import subprocess
import sys

import pytest

from redis_zset_ts import TimeSeries
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
    points_purged_counter,
    points_read_counter,
    points_written_counter,
    track_command,
)
from tests.mocks import MockRedis


def _counter_value(counter):
    return counter._value.get()


# ============================================================================
# Metrics Tests
# ============================================================================


class TestPrometheusMetrics:
    """Test Prometheus metrics collection."""

    @pytest.mark.asyncio
    async def test_track_command_counts_success(self):
        @track_command("TEST_OK")
        async def command():
            return "done"

        counter = command_counter.labels(command="TEST_OK", status="success")
        initial_value = _counter_value(counter)

        assert await command() == "done"

        assert _counter_value(counter) == initial_value + 1

    @pytest.mark.asyncio
    async def test_track_command_counts_failure(self):
        @track_command("TEST_FAIL")
        async def command():
            raise RuntimeError("boom")

        counter = command_counter.labels(command="TEST_FAIL", status="failure")
        initial_value = _counter_value(counter)

        with pytest.raises(RuntimeError):
            await command()

        assert _counter_value(counter) == initial_value + 1

    @pytest.mark.asyncio
    async def test_track_command_observes_duration(self):
        @track_command("TEST_TIMED")
        async def command():
            return None

        await command()

        histogram = command_duration.labels(command="TEST_TIMED")
        assert histogram._sum.get() >= 0

    @pytest.mark.asyncio
    async def test_series_point_counters(self):
        series = TimeSeries("metrics", "points", MockRedis())
        written = _counter_value(points_written_counter)
        read = _counter_value(points_read_counter)
        purged = _counter_value(points_purged_counter)

        await series.add_multiple_values([(1.0, 1), (2.0, 2), (3.0, 3)])
        await series.get_all()
        await series.purge(3.0)

        assert _counter_value(points_written_counter) == written + 3
        assert _counter_value(points_read_counter) == read + 3
        assert _counter_value(points_purged_counter) == purged + 2

    def test_metrics_export(self):
        data = get_metrics()

        assert isinstance(data, bytes)
        assert b"zset_ts_commands_total" in data
        assert b"zset_ts_points_written_total" in data


# ============================================================================
# Logging Tests
# ============================================================================


class TestStructuredLogging:
    """Test JSON formatting and series-bound loggers."""

    def _record(self, message="hello", **extra):
        logger = get_logger("tests.observability")
        record = logger.makeRecord(
            logger.name, logging.INFO, __file__, 10, message, None, None, extra=extra or None
        )
        return record

    def test_json_formatter_fields(self):
        output = json.loads(JSONFormatter().format(self._record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "tests.observability"
        assert output["message"] == "hello"
        assert "timestamp" in output

    def test_json_formatter_extra_fields(self):
        record = self._record(extra_fields={"key": "sensors:temp", "points": 3})
        output = json.loads(JSONFormatter().format(record))

        assert output["key"] == "sensors:temp"
        assert output["points"] == 3

    def test_json_formatter_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()

        output = json.loads(JSONFormatter().format(record))
        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "bad value"

    def test_get_logger_without_fields_is_plain_logger(self):
        assert isinstance(get_logger("tests.observability"), logging.Logger)

    def test_adapter_binds_fields(self, caplog):
        logger = get_logger("tests.observability", series="sensors:temp")
        assert isinstance(logger, SeriesLoggerAdapter)

        with caplog.at_level(logging.INFO, logger="tests.observability"):
            logger.info("bound", extra={"extra_fields": {"command": "ZADD"}})

        (record,) = caplog.records
        assert record.extra_fields == {"series": "sensors:temp", "command": "ZADD"}
        output = json.loads(JSONFormatter().format(record))
        assert output["series"] == "sensors:temp"
        assert output["command"] == "ZADD"

    def test_setup_logging_leaves_root_handlers_alone(self):
        root = logging.getLogger()
        sentinel = logging.NullHandler()
        root.addHandler(sentinel)
        stream = logging.StreamHandler()

        try:
            handler = setup_logging(level="DEBUG", handler=stream)

            assert handler is stream
            assert sentinel in root.handlers
            assert stream in logging.getLogger("redis_zset_ts").handlers
            assert isinstance(stream.formatter, JSONFormatter)
        finally:
            root.removeHandler(sentinel)
            logging.getLogger("redis_zset_ts").removeHandler(stream)

    def test_import_does_not_configure_logging(self):
        script = (
            "import logging\n"
            "handler = logging.NullHandler()\n"
            "logging.getLogger().addHandler(handler)\n"
            "import redis_zset_ts\n"
            "print(handler in logging.getLogger().handlers)\n"
        )
        env = dict(os.environ, LOG_LEVEL="WARNING")
        result = subprocess.run(
            [sys.executable, "-c", script],
            capture_output=True,
            text=True,
            env=env,
            cwd=os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
            check=True,
        )
        assert result.stdout.strip() == "True"

    @pytest.mark.asyncio
    async def test_series_logs_purge(self, caplog):
        series = TimeSeries("logging", "purge", MockRedis())
        await series.add_multiple_values([(1.0, 1), (2.0, 2)])

        with caplog.at_level(logging.INFO, logger="redis_zset_ts.series"):
            await series.purge(2.0)

        assert any("Purged 1 point(s)" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_series_records_carry_key(self, caplog):
        series = TimeSeries("logging", "keyed", MockRedis())
        await series.add(1.0, 1)

        with caplog.at_level(logging.INFO, logger="redis_zset_ts.series"):
            await series.delete()

        (record,) = [r for r in caplog.records if r.name == "redis_zset_ts.series"]
        assert record.extra_fields == {"series": "logging:keyed"}
