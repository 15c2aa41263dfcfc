"""
Structured logging configuration with structlog.

Every event carries the service name and environment. Production renders
one JSON object per line; other environments render for the console.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from storedash.core.config import settings

_configured = False


def _add_service_context(_: Any, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def configure_logging(level: Optional[str] = None, *, force: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    ``level`` overrides ``settings.log_level``. Repeated calls are no-ops
    unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service_context,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "production":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=force,
    )

    # Driver and server chatter
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "asyncpg", "aiosqlite"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
