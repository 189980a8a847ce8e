"""Logging configuration using structlog."""

import logging
import sys

import structlog

from dexpaid.config.settings import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the application."""
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # Use JSON in production, pretty print in debug
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx and apscheduler log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
