"""Scoped logging context.

Fields bound here (run_id, direction, candidate_id, ...) are attached to every
log record emitted inside the scope by ContextualFilter. Storage is a
ContextVar, so each thread and each copied context sees its own fields.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("recruit_match_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound in the current context."""
    return dict(_LOG_CONTEXT.get())


def clear_log_context() -> None:
    """Drop every bound field. Mostly useful in tests."""
    _LOG_CONTEXT.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind fields to all log records emitted inside the block.

    Nested blocks add to (and may override) the outer fields; the outer
    fields come back when the block exits, even on error.

    Example:
        >>> with log_context(run_id="3f2a", direction="candidates"):
        ...     logger.info("Reconciliation run started")
    """
    token = _LOG_CONTEXT.set({**_LOG_CONTEXT.get(), **fields})
    try:
        yield get_log_context()
    finally:
        _LOG_CONTEXT.reset(token)
