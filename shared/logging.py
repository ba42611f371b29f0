"""
Logger factory for quire.

Example:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("user_login", user_id="123", collection="users")
"""

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import setup_logging


def get_logger(name: str) -> BoundLogger:
    """Get a configured structlog logger (typically for ``__name__``)."""
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """
    Bind context to a logger for all subsequent log calls.

    Example:
        >>> log = log_with_context(get_logger(__name__), collection="users")
        >>> log.info("document_created")  # includes collection="users"
    """
    return logger.bind(**context)


__all__ = ["get_logger", "log_with_context", "setup_logging"]
