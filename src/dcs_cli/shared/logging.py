"""Logging configuration for dcs-cli.

Configures structlog on top of the standard library. Status output for the
operator goes through the rich console in formatters.py; these logs are
diagnostic and go to stderr.
"""

import logging
import os
import sys

import structlog

LOG_LEVEL_ENV = "DCS_LOG_LEVEL"
LOG_JSON_ENV = "DCS_LOG_JSON"


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> None:
    """Configure logging for the application.

    Called once by each entry point before any command runs.

    Args:
        level: Log level name; falls back to $DCS_LOG_LEVEL, then "warning"
        json_output: Render JSON lines; falls back to $DCS_LOG_JSON
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "warning")
    if json_output is None:
        json_output = os.environ.get(LOG_JSON_ENV, "").lower() in ("1", "true", "yes")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)

    logging.basicConfig(
        level=log_level,
        handlers=[stream_handler],
        format="%(message)s",
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance (typically for __name__)."""
    return structlog.get_logger(name)
