"""Structured logging configuration.

JSON lines for deployments, coloured key/value output for local runs.
Everything is written to stdout, including aiohttp's standard-library loggers.
"""

import logging
import sys
import structlog


def build_processors(log_format: str = "json") -> list:
    """Processor chain ending in the renderer for ``log_format``."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(
    service_name: str = "beer-service",
    level: str = "INFO",
    log_format: str = "json",
):
    """Configure structlog and route standard logging to stdout."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.contextvars.bind_contextvars(service=service_name)

    return structlog.get_logger()
