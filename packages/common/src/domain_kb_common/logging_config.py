"""structlog configuration.

Both servers speak JSON-RPC on stdout, so every log line is rendered to
stderr regardless of format.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import structlog

from domain_kb_common.config import get_settings


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and stdlib logging to write to stderr.

    Args:
        level: Log level name (default: from settings)
        log_format: "console" or "json" (default: from settings)
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()
    numeric_level = getattr(logging, level, logging.INFO)

    # Third-party libraries (mcp, httpx, openai) log through stdlib
    logging.basicConfig(
        level=numeric_level,
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
