"""Structured logging for the directory service.

One call at startup, ``configure_logging``, routes both ``structlog`` events
and stdlib loggers (uvicorn, opensearch-py) to stdout. Modules then log with
``structlog.get_logger("<dotted name>")`` and key/value context.
"""

import logging
import sys
from typing import Any, Dict, List

import structlog
from structlog.stdlib import LoggerFactory, add_logger_name

LOG_FORMATS = ("json", "console")

# opensearch-py logs every HTTP round trip at INFO
CHATTY_LOGGERS = ("opensearch", "urllib3")


def _renderers(log_format: str) -> List[Any]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    # ConsoleRenderer formats exceptions itself
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    **context: Any
) -> None:
    """Configure structured logging for the service.

    ``context`` is bound to every event alongside ``service`` (for example
    ``env="prod"``). Raises ``ValueError`` for an unknown ``log_format``.
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_logger_name,
            *_renderers(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    bound: Dict[str, Any] = {"service": service_name, **context}
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**bound)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
