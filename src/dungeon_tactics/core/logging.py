"""Structured logging for the dungeon tactics rules engine.

Engine modules log through structlog. Hosts decide how those records are
rendered by calling :func:`configure_logging` (or
:func:`configure_from_settings`) once at startup; until then structlog's
defaults apply. While an encounter runs, the orchestrator binds its
encounter id so every record carries it.

Example:
    >>> from dungeon_tactics.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("Ability used", entity_id="hero", ability="basic_attack")
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.types import EventDict, WrappedLogger

    from dungeon_tactics.core.config import Settings


ENGINE_NAME = "dungeon_tactics"


def add_engine_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every record with the engine name.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with an ``engine`` key.
    """
    event_dict.setdefault("engine", ENGINE_NAME)
    return event_dict


def _level_number(level: str) -> int:
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure how engine log records are rendered.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json_format: Emit one JSON object per line instead of console output.
        stream: Where records are written; defaults to stdout.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_engine_context,
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream is None and sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: Settings, *, stream: TextIO | None = None) -> None:
    """Configure logging from the engine settings.

    Debug mode forces DEBUG level regardless of ``log_level``.
    """
    level = "DEBUG" if settings.debug else settings.log_level
    configure_logging(level=level, json_format=settings.json_logs, stream=stream)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger for an engine module.

    Args:
        name: Optional logger name (typically __name__).

    Returns:
        A structlog BoundLogger.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in every subsequent record.

    The combat orchestrator binds the encounter id here for the lifetime of
    an encounter.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context variables for the duration of a ``with`` block.

    Example:
        >>> with log_context(entity_id="hero"):
        ...     logger.info("Turn started")
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "ENGINE_NAME",
    "add_engine_context",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
