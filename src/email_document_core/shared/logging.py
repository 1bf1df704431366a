"""Structured logging utilities for the email document core.

Every record carries the ``component`` that emitted it and the
``correlation_id`` of the editor session it belongs to, so that a mutation,
the history commit it caused and the emission that followed can be traced
together. Sessions without a configured id get one from
``new_correlation_id``.
"""

import logging
import secrets
from typing import Any, Dict, Optional, TextIO

PACKAGE_LOGGER = "email_document_core"

LOG_FORMAT = "%(levelname)s [%(component)s] %(correlation_id)s %(message)s"


def new_correlation_id() -> str:
    """Short random id for one editor session."""
    return f"sess-{secrets.token_hex(4)}"


class CorrelationLogger:
    """Logger that automatically includes correlation ID and component information."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional editor session id
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split('.')[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }

        if extra:
            combined_extra.update(extra)

        return combined_extra

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with correlation info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with correlation info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with correlation info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log error message with correlation info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log exception message with correlation info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))


class ContextDefaultsFilter(logging.Filter):
    """Fills ``component`` and ``correlation_id`` on records from plain loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "component", None) is None:
            record.component = record.name.split('.')[-1]
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = "-"
        return True


def configure_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Handler:
    """Send package log records to ``stream`` (stderr by default).

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Minimum level for package loggers
        stream: Output stream for the handler

    Returns:
        The installed handler
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if getattr(existing, "_email_document_core", False):
            package_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(ContextDefaultsFilter())
    handler._email_document_core = True  # type: ignore[attr-defined]

    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional editor session id
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
