"""
Structured logging for iperfcompare.

Events go through stdlib logging to stderr, so commands that print JSON
results on stdout stay machine-readable. The upload server can switch to
one JSON object per line.
"""

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from iperfcompare.config.settings import LoggingConfig

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderers(json_output: bool) -> list[structlog.types.Processor]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging for the CLI and the upload server.

    Safe to call more than once; a later call (e.g. after `serve` has
    loaded its config file) replaces the level and renderer.

    Args:
        level: Log level name; unknown names fall back to INFO.
        json_output: Emit one JSON object per event instead of console lines.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, *_renderers(json_output)],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: "LoggingConfig") -> None:
    """Apply the `logging` section of a loaded AppConfig."""
    configure_logging(level=settings.level, json_output=settings.json_output)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually named after the calling module."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind values to every event logged inside the block.

    Example:
        with log_context(source_id="run-1.json"):
            log.warning("Invalid JSON")  # carries source_id="run-1.json"

    Args:
        **kwargs: Key-value pairs to add to log context.

    Returns:
        Context manager that binds the values.
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
