"""structlog configuration.

Every module does `logger = structlog.get_logger()` and logs dotted event
names with key/value context. This sets up the processor chain once at
startup: request-scoped contextvars (request_id) are merged into every
entry, and output is either colored console lines or JSON.
"""

import logging

import structlog

from taskflow.config import settings


def configure_logging(json_logs: bool | None = None) -> None:
    """Configure structlog for the process. Safe to call more than once."""
    if json_logs is None:
        json_logs = settings.log_json

    level = logging.DEBUG if settings.debug else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
