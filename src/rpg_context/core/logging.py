"""Structured logging for the RPG prompt-context builder.

The package only emits events; the host decides where they go by calling
:func:`configure_logging` once at startup, usually with its
:class:`~rpg_context.core.config.Settings`. Every recoverable failure during
context assembly is logged as a warning carrying an ``operation`` field,
and builds bind the current ``turn_key`` for their duration.

Example:
    >>> from rpg_context.core.config import get_settings
    >>> from rpg_context.core.logging import configure_logging, get_logger
    >>> configure_logging(get_settings())
    >>> get_logger(__name__).warning("Region lookup failed", operation="resolve_region")
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import IO, TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from rpg_context.core.config import Settings


DEFAULT_APP_NAME = "rpg_context"

_log_stream: IO[str] | None = None


# =============================================================================
# Processors
# =============================================================================


def app_name_processor(app_name: str) -> Processor:
    """Build a processor tagging every event with ``app_name``.

    Args:
        app_name: Value stored under the ``app`` key.

    Returns:
        A structlog processor.
    """

    def add_app_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        return event_dict

    return add_app_name


def _processors(app_name: str, json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        app_name_processor(app_name),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=False, exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def _resolve_level(settings: Settings | None, level: str | None) -> int:
    if level is None and settings is not None:
        level = "DEBUG" if settings.debug else settings.log_level
    numeric = logging.getLevelName((level or "INFO").upper())
    return numeric if isinstance(numeric, int) else logging.INFO


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Route the package's log events.

    Keyword arguments override the corresponding settings. Events go to
    ``log_file`` when one is configured, else to stderr.

    Args:
        settings: Source of ``log_level``, ``debug`` (forces DEBUG),
            ``json_logs``, ``log_file`` and ``app_name``.
        level: Logging level name.
        json_format: Render JSON lines instead of console output.
        log_file: Path of a file to append events to.
    """
    global _log_stream

    if json_format is None:
        json_format = settings.json_logs if settings is not None else False
    if log_file is None and settings is not None and settings.log_file is not None:
        log_file = str(settings.log_file)
    app_name = settings.app_name if settings is not None else DEFAULT_APP_NAME

    _close_log_stream()
    if log_file:
        _log_stream = open(log_file, "a", encoding="utf-8")
        logger_factory: Any = structlog.WriteLoggerFactory(file=_log_stream)
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=_processors(app_name, json_format),
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(settings, level)),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Restore structlog's defaults and close any log file."""
    _close_log_stream()
    structlog.reset_defaults()


def _close_log_stream() -> None:
    global _log_stream
    if _log_stream is not None:
        _log_stream.close()
        _log_stream = None


# =============================================================================
# Loggers and Context
# =============================================================================


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent log entries."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def scoped_context(**kwargs: Any) -> AbstractContextManager[None]:
    """Bind context variables only for the duration of a ``with`` block.

    Leaving the block restores whatever the host had bound before.

    Args:
        **kwargs: Key-value pairs to bind to the logging context.

    Returns:
        A context manager that unbinds the keys on exit.
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = [
    "DEFAULT_APP_NAME",
    "app_name_processor",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "scoped_context",
]
