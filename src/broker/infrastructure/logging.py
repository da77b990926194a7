"""Structlog configuration for the realm broker.

Probe events are rendered as coloured console lines for interactive use and
as JSON lines otherwise. Standard library logging (used by SQLAlchemy when
``REALM_SQL_ECHO`` is set) is aligned to the same level and stream.
"""

import logging
import os
import sys

import structlog


def _wants_colour() -> bool:
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    if os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes"):
        return True
    return sys.stdout.isatty()


def configure_logging(level: str = "INFO", json_output: bool | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Minimum level name to emit (e.g. "DEBUG", "INFO").
        json_output: Force JSON (True) or console (False) rendering. When
            None, console rendering is used for a TTY or when FORCE_COLOR
            is set.
    """
    numeric_level = logging.getLevelNamesMapping()[level.upper()]
    if json_output is None:
        json_output = not _wants_colour()

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    logging.basicConfig(
        format="%(name)s %(levelname)s %(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
