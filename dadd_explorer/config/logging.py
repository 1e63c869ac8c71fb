"""
Logging Configuration for DADD Explorer

structlog over the standard library's logging, so records from uvicorn
and SQLAlchemy are rendered the same way as the application's own.
Request-scoped values (the request id) are bound with
``structlog.contextvars`` by the request logging middleware and merged
into every event.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter
from structlog.typing import EventDict, Processor, WrappedLogger

from dadd_explorer.config.settings import Settings, get_settings

# Third-party loggers sent through the application handler instead of their own
UVICORN_LOGGERS = ["uvicorn", "uvicorn.error", "uvicorn.access"]
SQL_LOGGER = "sqlalchemy.engine"


def add_app_context(settings: Settings) -> Processor:
    """Processor stamping every event with the application name and environment."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", settings.app_name)
        event_dict.setdefault("environment", settings.app_env)
        return event_dict

    return processor


def build_processors(settings: Settings) -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_app_context(settings),
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def build_renderer(settings: Settings) -> Processor:
    if settings.monitoring.log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=settings.is_development and sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        settings: Settings to read defaults from (cached settings when omitted)
    """
    settings = settings or get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    numeric_level = getattr(logging, level, logging.INFO)

    processors = build_processors(settings)

    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        ProcessorFormatter(processor=build_renderer(settings), foreign_pre_chain=processors)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    routed_levels = {name: numeric_level for name in UVICORN_LOGGERS}
    # SQL statements are only logged when echo is requested
    routed_levels[SQL_LOGGER] = logging.INFO if settings.database.echo else logging.WARNING

    for logger_name, routed_level in routed_levels.items():
        routed = logging.getLogger(logger_name)
        routed.handlers = [handler]
        routed.setLevel(routed_level)
        routed.propagate = False

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
    )
