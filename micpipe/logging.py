"""Structured logging for micpipe.

Uses structlog with stdlib logging as the backend. Importing micpipe never
touches logging configuration: module loggers are lazy and follow whatever
structlog setup is active when they first emit. Applications that embed the
pipeline configure logging themselves; the ``micpipe`` CLI calls
``configure_logging()``.

Two formats:
- console: human-readable for development (default)
- json: structured for production
"""

from __future__ import annotations

import logging
import os
from typing import TextIO

import structlog

PACKAGE_LOGGER = "micpipe"

_configured = False


def configure_logging(
    log_format: str | None = None,
    level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the ``micpipe`` logger tree.

    Idempotent: subsequent calls are ignored. The handler is attached to the
    ``micpipe`` stdlib logger, not the root logger, so handlers installed by
    a host application are left alone.

    Args:
        log_format: "json" or "console". Default via MICPIPE_LOG_FORMAT env or "console".
        level: Log level (DEBUG, INFO, WARNING, ERROR). Default via MICPIPE_LOG_LEVEL env or "INFO".
        stream: Destination for log lines. Default: stderr.
    """
    global _configured
    if _configured:
        return

    resolved_format = log_format or os.environ.get("MICPIPE_LOG_FORMAT", "console")
    resolved_level = level or os.environ.get("MICPIPE_LOG_LEVEL", "INFO")

    if resolved_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, resolved_level.upper(), logging.INFO))
    package_logger.propagate = False

    _configured = True


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Return a lazy logger with component context.

    Nothing is configured here; the logger resolves the active structlog
    configuration on first use.

    Args:
        component: Component name (e.g., "effects.agc", "pipeline").

    Returns:
        Logger named ``micpipe.<component>`` with the component field bound.
    """
    return structlog.get_logger(  # type: ignore[no-any-return]
        f"{PACKAGE_LOGGER}.{component}", component=component
    )
