"""Structured logging configuration for colo-scout.

Uses structlog so per-endpoint events carry their fields (endpoint,
data center, latency, error) as structured data rather than free text.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def get_utc_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add UTC timestamp to log events."""
    event_dict["timestamp"] = get_utc_timestamp()
    return event_dict


def add_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add default context fields to log events."""
    event_dict.setdefault("service", "colo-scout")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> Any:
    """Configure structured logging.

    Log records go to stderr so they never interleave with result
    output written to stdout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON logs for machine parsing
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper())

    processors = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    root_logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        root_logger.addHandler(file_handler)

    return structlog.get_logger("colo_scout")


def get_logger(name: str = "colo_scout") -> Any:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        structlog logger bound to *name*
    """
    return structlog.get_logger(name)
