"""Logging context utilities for per-request correlation IDs."""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"

# Context variable for correlation ID (safe across async tasks)
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID."""
    return _correlation_id.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Set a correlation ID for the current context.

    Args:
        cid: Optional correlation ID. If None, generates a new UUID.

    Returns:
        The correlation ID (newly generated or provided)
    """
    if cid is None:
        cid = uuid.uuid4().hex
    _correlation_id.set(cid)
    return cid


def clear_correlation_id():
    """Clear the current correlation ID."""
    _correlation_id.set(None)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "none"
        return True


def setup_correlation_logging(level: int = logging.INFO):
    """Configure root logging with the correlation ID filter on every handler."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationIDFilter) for f in handler.filters):
            handler.addFilter(CorrelationIDFilter())
