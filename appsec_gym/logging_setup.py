"""Structured logging setup shared by the CLI and the API server."""

import logging
import sys
from typing import Optional, TextIO

import structlog

from appsec_gym.config import get_settings


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Looked up per call, stderr may be swapped after configuration
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    level: Optional[str] = None,
    debug: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog for the process.

    Logs go to stderr by default so they never interleave with CLI reports.
    """
    settings = get_settings()
    level_value = getattr(logging, (level or settings.LOG_LEVEL).upper(), None)
    if not isinstance(level_value, int):
        level_value = logging.WARNING
    use_console = settings.DEBUG if debug is None else debug

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if use_console else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.PrintLoggerFactory(file=stream) if stream else _stderr_logger,
        cache_logger_on_first_use=False,
    )
