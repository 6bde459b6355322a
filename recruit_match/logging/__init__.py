"""Structured logging: component loggers, scoped context and formatters."""

import logging
from typing import Optional, Union

from .config import ContextualFilter, JSONFormatter, KeyValueFormatter, configure_logging
from .context import clear_log_context, get_log_context, log_context


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that tags records with a component name.

    Unlike the stdlib adapter, per-call ``extra`` is merged with (and wins
    over) the adapter's fields instead of replacing them.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, tagged with ``component`` when one is given.

    Example:
        >>> logger = get_logger(__name__, component="reconciliation")
        >>> logger.info("Reconciliation run started", extra={"event": "reconcile.run.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = [
    "ComponentLoggerAdapter",
    "ContextualFilter",
    "JSONFormatter",
    "KeyValueFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "log_context",
]
