"""Structured logging setup.

structlog renders through the stdlib ``logging`` module so that records
from third-party libraries (SQLAlchemy, Dynaconf) share one handler and
one format with hivestore's own events.
"""

import logging
import logging.config
from typing import Any

import structlog
from structlog.types import Processor

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        level: Minimum level name (DEBUG, INFO, ...)
        json_output: Render JSON lines instead of the console format
    """
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "structlog.stdlib.ProcessorFormatter",
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": _SHARED_PROCESSORS,
                },
            },
            "handlers": {
                "default": {
                    "level": level.upper(),
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": level.upper(),
                    "propagate": True,
                },
                # SQLAlchemy echoes through its own loggers; keep them quiet
                # unless storage.echo asks for statements.
                "sqlalchemy": {"level": "WARNING", "propagate": True},
            },
        }
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a structlog logger, optionally bound to initial context."""
    return structlog.get_logger(name, **initial_values)
