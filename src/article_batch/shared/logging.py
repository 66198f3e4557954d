"""Structured logging setup.

Logs always go to stderr so that stdout carries nothing but document content
and can be piped or redirected safely.
"""

import logging
import sys
from typing import Optional

import structlog

from article_batch.shared.config import Settings


def configure_logging(settings: Settings, level: Optional[str] = None) -> None:
    """Configure structlog over stdlib logging.

    Args:
        settings: Application settings providing LOG_LEVEL and LOG_FORMAT
        level: Optional level overriding settings.LOG_LEVEL (e.g. from --log-level)
    """
    log_level = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True
    )

    if settings.LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
