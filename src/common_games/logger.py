"""
Logging setup for the bot process.

structlog renders JSON lines in production and colored console output
locally. The Steam Web API takes its key as a query parameter, so string
values are scrubbed of `key=...` before rendering, and the per-request
lines httpx writes through the standard library are held at WARNING.
"""

import logging
import re
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict, Processor, WrappedLogger

from common_games.config import get_settings

API_KEY_PATTERN = re.compile(r"(\bkey=)[^&\s\"']+")
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def redact_api_key(_logger: "WrappedLogger", _method: str, event_dict: "EventDict") -> "EventDict":
    """Mask `key=` query parameters in any string value of the event."""
    for field, value in event_dict.items():
        if isinstance(value, str) and "key=" in value:
            event_dict[field] = API_KEY_PATTERN.sub(r"\1***", value)
    return event_dict


def _renderer(fmt: str) -> "Processor":
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Overrides LOG_LEVEL, e.g. "DEBUG" while chasing a
            misclassified game
    """
    config = get_settings().logging
    level_no = logging.getLevelName((level or config.level).upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if config.include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.processors.format_exc_info,
        redact_api_key,
        _renderer(config.format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_no, logging.WARNING))


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Logger for `name` with `initial_context` bound.

    Example:
        >>> logger = get_logger(__name__, component="classifier")
        >>> logger.info("Classified game", app_id=570, resolution="store_page")
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
