"""Structured logging configuration.

This module configures structured JSON event logging once per process.
It prefers structlog and falls back to standard logging if absent.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure process-wide structured logging.

    Args:
        level: Minimum level name (debug, info, warning, error).
    """
    global _CONFIGURED_LEVEL
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    _CONFIGURED_LEVEL = level
    logging.getLogger("vantage").setLevel(numeric_level)
    try:
        import structlog
    except ImportError:
        return
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger with structured output.
    """
    if _CONFIGURED_LEVEL is None:
        configure_logging()
    try:
        import structlog
    except ImportError:
        return _get_standard_logger(name)
    return structlog.get_logger(name)


def _stderr_logger_factory(*_args: object) -> Any:
    """Build a print logger on whatever stream is sys.stderr right now."""
    import structlog

    return structlog.PrintLogger(file=sys.stderr)


def _get_standard_logger(name: str) -> Any:
    """Create a stdlib logger fallback under the ``vantage`` hierarchy."""
    logger = logging.getLogger(f"vantage.{name}")
    root = logging.getLogger("vantage")
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return _StructuredStandardLogger(logger)


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(self, event: str, **fields: object) -> None:
        self._logger.debug(_format_event(event, fields))

    def info(self, event: str, **fields: object) -> None:
        self._logger.info(_format_event(event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self._logger.warning(_format_event(event, fields))

    def error(self, event: str, **fields: object) -> None:
        self._logger.error(_format_event(event, fields))


def _format_event(event: str, fields: dict[str, object]) -> str:
    """Render a structured event line as sorted JSON."""
    if not fields:
        return event
    payload = {"event": event, **fields}
    return json.dumps(payload, sort_keys=True, default=str)
