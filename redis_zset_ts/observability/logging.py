"""
Logging support for redis-zset-ts.

Library modules log through ``logging.getLogger(__name__)``. A TimeSeries
logs through a ``SeriesLoggerAdapter`` so every record it emits carries
the series key in ``record.extra_fields``. Nothing here runs at import:
handlers are only attached when an application calls ``setup_logging``,
and only to the ``redis_zset_ts`` logger, never to the root logger.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple, Union

PACKAGE_LOGGER = "redis_zset_ts"


class SeriesLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter binding fixed fields (such as the series key) to records.

    Fields passed per call as ``extra={"extra_fields": {...}}`` are merged
    over the bound ones.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        fields = dict(self.extra)
        fields.update(extra.get("extra_fields", {}))
        extra["extra_fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, **fields: Any) -> Union[logging.Logger, SeriesLoggerAdapter]:
    """
    Get a logger, optionally bound to fixed context fields.

    Example:
        logger = get_logger(__name__, series="sensors:temp")
        logger.info("Purged 3 point(s)")
    """
    logger = logging.getLogger(name)
    if not fields:
        return logger
    return SeriesLoggerAdapter(logger, fields)


class JSONFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.

    Fields: timestamp, level, logger, message, plus any bound context
    fields (``series``, ``command``, ...) and exception details.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    handler: Optional[logging.Handler] = None,
) -> logging.Handler:
    """
    Attach a handler to the library's own logger.

    Args:
        level: Log level for redis_zset_ts loggers
        json_format: Use JSONFormatter (True) or a plain text format (False)
        handler: Handler to attach; a stderr StreamHandler by default

    Returns:
        The attached handler, so callers can remove it again
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if handler is None:
        handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s [%(name)s] %(message)s")
        )

    package_logger.addHandler(handler)
    return handler
