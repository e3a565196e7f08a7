"""
Structured logging setup using structlog.

The package itself only logs through ``logging.getLogger(__name__)`` with
``extra=`` fields. ``setup_logging`` is opt-in: it renders those records (and
any context bound with ``bind_context``) as JSON or console lines, and it
installs one handler of its own next to whatever handlers the host process
already has.
"""

import logging
import sys
from typing import Any, TextIO

import structlog

from jobqueue.settings import Settings, get_settings

# Name of the root handler installed by setup_logging
LOG_HANDLER_NAME = "jobqueue"


def setup_logging(settings: Settings | None = None, stream: TextIO | None = None) -> logging.Handler:
    """
    Configure structured logging.

    Calling it again replaces the handler from the previous call; handlers
    installed by anything else are left in place.

    Args:
        settings: Settings to read the level and format from. Defaults to
            the cached application settings.
        stream: Where to write log lines. Defaults to stdout.

    Returns:
        The installed handler.
    """
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(LOG_HANDLER_NAME)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == LOG_HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Statement echo is opt-in through the engine, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    return handler


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables to all subsequent log records.

    Args:
        **kwargs: Key-value pairs to add to log context.
    """
    structlog.contextvars.bind_contextvars(**kwargs)
