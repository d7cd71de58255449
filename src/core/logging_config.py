"""Structured logging configuration.

Logs are JSON events on stderr so CLI stdout stays machine-readable.
structlog is preferred; standard logging is the fallback if absent.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from core.constants import DEFAULT_LOG_LEVEL

_STANDARD_LOGGERS: dict[str, "_StructuredStandardLogger"] = {}


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Apply the process-wide log level and renderer.

    Args:
        level: Standard level name such as ``INFO`` or ``DEBUG``.
    """
    numeric_level = logging.getLevelName(level)
    try:
        import structlog
    except ImportError:
        for adapter in _STANDARD_LOGGERS.values():
            adapter.set_level(numeric_level)
        return

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=_STDERR),
        cache_logger_on_first_use=False,
    )


class _StderrStream:
    """Writes to whatever ``sys.stderr`` is at call time."""

    def write(self, message: str) -> int:
        return sys.stderr.write(message)

    def flush(self) -> None:
        sys.stderr.flush()


_STDERR = _StderrStream()


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger with structured output.
    """
    try:
        import structlog
    except ImportError:
        return _get_standard_logger(name)

    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def _get_standard_logger(name: str) -> Any:
    """Create a stdlib logger fallback.

    Args:
        name: Logger name.

    Returns:
        Configured standard logger.
    """
    adapter = _STANDARD_LOGGERS.get(name)
    if adapter is not None:
        return adapter
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.getLevelName(DEFAULT_LOG_LEVEL))
    adapter = _StructuredStandardLogger(logger)
    _STANDARD_LOGGERS[name] = adapter
    return adapter


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def set_level(self, level: int) -> None:
        self._logger.setLevel(level)

    def debug(self, event: str, **fields: object) -> None:
        """Log a debug-level structured event."""
        self._logger.debug(_format_event(event, fields))

    def info(self, event: str, **fields: object) -> None:
        """Log an info-level structured event."""
        self._logger.info(_format_event(event, fields))

    def warning(self, event: str, **fields: object) -> None:
        """Log a warning-level structured event."""
        self._logger.warning(_format_event(event, fields))

    def error(self, event: str, **fields: object) -> None:
        """Log an error-level structured event."""
        self._logger.error(_format_event(event, fields))


def _format_event(event: str, fields: dict[str, object]) -> str:
    """Render a structured event line for standard logging.

    Args:
        event: Event name.
        fields: Event fields.

    Returns:
        JSON-encoded event string.
    """
    if not fields:
        return event
    payload = {"event": event, **fields}
    return json.dumps(payload, sort_keys=True, default=str)
