"""Core module providing configuration, logging, constants and base exceptions.

Exports:
    Exceptions:
        RpgContextError: Base exception for all context-builder errors.
        ConfigurationError: Configuration-related errors.
        ContextLookupError: Recoverable world lookup failures.
        NormalizationError: Unusable input shapes.
        StaticResourceError: Packaged resource load failures.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        reset_logging: Restore default logging and close the log file.
        scoped_context: Bind context for the duration of a block.
"""

from __future__ import annotations

from rpg_context.core.config import (
    AISettings,
    MemorySettings,
    Settings,
    SummarySettings,
    clear_settings_cache,
    coerce_positive_int,
    get_settings,
)
from rpg_context.core.exceptions import (
    ConfigurationError,
    ContextLookupError,
    NormalizationError,
    RpgContextError,
    StaticResourceError,
)
from rpg_context.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    reset_logging,
    scoped_context,
)


__all__ = [
    # Base exception
    "RpgContextError",
    # Exceptions
    "ConfigurationError",
    "ContextLookupError",
    "NormalizationError",
    "StaticResourceError",
    # Configuration
    "AISettings",
    "MemorySettings",
    "Settings",
    "SummarySettings",
    "clear_settings_cache",
    "coerce_positive_int",
    "get_settings",
    # Logging
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "scoped_context",
]
