"""Logging configuration for Recruit Match.

Two output formats share one pipeline: ContextualFilter stamps every record
with service/environment and the active log_context, then either
JSONFormatter or KeyValueFormatter renders the record with all extra fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Literal, Optional, TextIO, Tuple

from .context import get_log_context

LogFormat = Literal["json", "key-value"]

SERVICE_NAME = "recruit-match"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "sqlalchemy.pool")

_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord, skip=frozenset()) -> Iterator[Tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key in skip or key.startswith("_"):
            continue
        yield key, value


class ContextualFilter(logging.Filter):
    """Adds service, environment and the active log_context to every record.

    Fields passed explicitly through ``extra`` win over context fields.
    """

    def __init__(self, service: str = SERVICE_NAME, environment: str = "development"):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment
        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line with stable keys timestamp/level/logger/message."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _extra_fields(record):
            payload[key] = _jsonable(value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class KeyValueFormatter(logging.Formatter):
    """Human-readable line followed by sorted key=value pairs.

    Example:
        2025-11-04 10:30:00 [INFO] recruit_match.reconciliation.runner:
        Reconciliation run completed component=reconciliation failures=0
    """

    SKIP = frozenset({"service", "environment"})

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{key}={_kv_value(value)}"
            for key, value in sorted(_extra_fields(record, self.SKIP))
        ]
        return f"{line} {' '.join(pairs)}" if pairs else line


def _utc_timestamp(created: float) -> str:
    dt = datetime.fromtimestamp(created, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (str, int, float, bool, type(None), list, dict)):
        return value
    return str(value)


def _kv_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value)
    if any(ch in text for ch in ' =,"'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "development",
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root logger with one stdout handler.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' or 'key-value'
        environment: Deployment label stamped on every record
        stream: Output stream (defaults to stdout)

    Raises:
        ValueError: If level or format_type is invalid
    """
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format_type == "key-value":
        formatter = KeyValueFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        raise ValueError(f"Invalid log format: {format_type}. Must be 'json' or 'key-value'")

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(ContextualFilter(service=SERVICE_NAME, environment=environment))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": str(level).upper(),
            "log_format": format_type,
        },
    )
