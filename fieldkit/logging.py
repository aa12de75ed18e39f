"""Logging utilities for fieldkit.

The form application owns the terminal while it runs, so log output goes to
a file (plain or structured JSON) instead of the console.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

__all__ = [
    "setup_logging",
    "JSONFormatter",
]

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "INFO",
         "logger": "fieldkit.store.host", "message": "Persisted 4 values"}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_attrs = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS
        }
        # Field-scoped records are keyed by the field they concern
        if "field_id" in extra_attrs:
            log_data["field_id"] = extra_attrs.pop("field_id")
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str | int = logging.INFO,
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the ``fieldkit`` logger.

    Args:
        level: Log level name or number
        json_format: Use JSON output format (for log aggregation)
        log_file: File path to write logs to. Without one, records are
            dropped so nothing is printed over the running form.

    Returns:
        The configured ``fieldkit`` logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logger = logging.getLogger("fieldkit")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(level)
        handler.setFormatter(formatter)
    else:
        handler = logging.NullHandler()
    logger.addHandler(handler)
    logger.propagate = False

    return logger
