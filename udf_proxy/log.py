"""
Logging setup for the datafeed proxy.

Console-only: the service runs under a process manager that collects stdout.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging

from udf_proxy.config import Settings

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("operation", "reason", "upstream_status"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logging(settings: Settings) -> None:
    """
    Configure the ``udf_proxy`` logger tree.

    Only the package logger is touched so uvicorn's own handlers stay intact.
    Calling this again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger("udf_proxy")
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
