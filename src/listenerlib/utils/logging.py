"""Logging setup for listenerlib.

Listener modules log through ``logging.getLogger(__name__)``.  This module
routes that ``listenerlib.*`` tree through structlog's formatter, so
records from stream workers, queues and replay sources all render the
same way, on stdout and optionally in a file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

ROOT_LOGGER = "listenerlib"

# Libraries whose chatter drowns out per-frame listener logs
QUIET_LOGGERS = ("open3d",)


def _processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%H:%M:%S.%f", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _handlers(level: int, log_file: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(path), encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_json: bool = False,
) -> logging.Logger:
    """Attach structlog-formatted handlers to the ``listenerlib`` logger.

    Calling it again replaces the previous handlers.  The logger stops
    propagating to the root logger so an application's own logging setup
    does not print listener records twice.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR); unknown names mean INFO.
        log_file: Also write records to this file, creating its directory.
        log_json: One JSON object per line instead of console rendering.

    Returns:
        The ``listenerlib`` logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    processors = _processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in _handlers(numeric_level, log_file):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
