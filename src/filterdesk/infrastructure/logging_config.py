"""Structured logging configuration for filterdesk."""

import logging
import sys
from typing import Any, TextIO

import structlog

from .config import LoggingConfig


def configure_logging(
    level: str = "INFO", json_logs: bool = True, stream: TextIO = sys.stdout
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to use JSON formatting (True) or human-readable (False)
        stream: Output stream for logs (sys.stdout or sys.stderr)
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=stream,
        format="%(message)s"
        if json_logs
        else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors.extend(
            [
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.dev.ConsoleRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stderr_logging(level: str = "WARNING", json_logs: bool = False) -> None:
    """Configure logging to stderr with sensible defaults for CLI tools.

    Keeps stdout free for command output.
    """
    configure_logging(level=level, json_logs=json_logs, stream=sys.stderr)


def configure_from_config(config: LoggingConfig, stream: TextIO = sys.stderr) -> None:
    configure_logging(
        level=config.level, json_logs=config.format == "json", stream=stream
    )
