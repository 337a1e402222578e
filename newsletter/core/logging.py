"""
Process-wide structlog configuration.

``configure_logging`` is called exactly once per process: by the server
entry point, or by the test session fixture.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    name: str = "newsletter",
    level: str = "info",
    fmt: str = "json",
    stream: TextIO | None = None,
) -> structlog.typing.FilteringBoundLogger:
    """Configure structlog with the specified level, format and output stream.

    Returns the process logger, bound to ``name``.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
    )
    return structlog.get_logger().bind(service=name)
