"""Configuration management for the RPG prompt-context builder.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files and runtime overrides.

Context assembly must never fail because of a bad configuration value, so
the numeric caps used during a build are coerced leniently: anything that is
not a positive integer falls back to its documented default instead of
raising a validation error.

Example:
    >>> from rpg_context.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.memory.max_memories_to_recall
    10

Environment Variables:
    RPG_CONTEXT_MEMORY_MAX_MEMORIES_TO_RECALL: Per-actor memory recall cap
    RPG_CONTEXT_SUMMARY_MAX_UNSUMMARIZED_LOG_ENTRIES: Verbatim transcript tail size
    RPG_CONTEXT_SUMMARY_MAX_SUMMARIZED_LOG_ENTRIES: Summarized transcript head size
    RPG_CONTEXT_AI_MODEL: Model identifier passed through to slim contexts
    RPG_CONTEXT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    RPG_CONTEXT_DEBUG: Force DEBUG logging
    RPG_CONTEXT_JSON_LOGS: Render log events as JSON lines
    RPG_CONTEXT_LOG_FILE: Write log events to a file
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rpg_context.core.constants import (
    DEFAULT_EXPERIENCE_POINT_VALUES_PATH,
    DEFAULT_MAX_MEMORIES_TO_RECALL,
)
from rpg_context.core.exceptions import ConfigurationError
from rpg_context.core.logging import get_logger


logger = get_logger(__name__)


def coerce_positive_int(value: Any, default: int) -> int:
    """Coerce a loosely-typed config value into a positive integer.

    Integers, integral floats and digit strings are accepted. Booleans,
    non-positive numbers and anything else yield ``default``.

    Args:
        value: Raw configuration value.
        default: Value returned when ``value`` is not a positive integer.

    Returns:
        The coerced integer or ``default``.

    Example:
        >>> coerce_positive_int("12", 10)
        12
        >>> coerce_positive_int(-3, 10)
        10
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else default
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit() and int(text) > 0:
            return int(text)
    return default


class MemorySettings(BaseSettings):
    """Configuration for per-actor memory recall.

    Attributes:
        max_memories_to_recall: Maximum important memories surfaced per actor.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPG_CONTEXT_MEMORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_memories_to_recall: int = Field(
        default=DEFAULT_MAX_MEMORIES_TO_RECALL,
        description="Maximum important memories surfaced per actor",
    )

    @field_validator("max_memories_to_recall", mode="before")
    @classmethod
    def default_invalid_recall_cap(cls, value: Any) -> int:
        """Replace absent or invalid caps with the default of 10."""
        coerced = coerce_positive_int(value, DEFAULT_MAX_MEMORIES_TO_RECALL)
        if value is not None and coerce_positive_int(value, 0) == 0:
            logger.warning(
                "Invalid memory recall cap, using default",
                operation="load_settings",
                value=value,
                default=coerced,
            )
        return coerced


class SummarySettings(BaseSettings):
    """Configuration for transcript windowing.

    A cap of zero disables the corresponding part of the transcript.

    Attributes:
        max_unsummarized_log_entries: Entries rendered verbatim at the tail.
        max_summarized_log_entries: Entries rendered from their summary.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPG_CONTEXT_SUMMARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_unsummarized_log_entries: int = Field(
        default=0,
        ge=0,
        description="Transcript entries rendered verbatim",
    )
    max_summarized_log_entries: int = Field(
        default=0,
        ge=0,
        description="Transcript entries rendered from their summary",
    )

    @field_validator("max_unsummarized_log_entries", "max_summarized_log_entries", mode="before")
    @classmethod
    def zero_invalid_caps(cls, value: Any) -> int:
        """Treat any non-positive or malformed cap as disabled."""
        return coerce_positive_int(value, 0)


class AISettings(BaseSettings):
    """Configuration passed through to the text-generation service.

    Attributes:
        model: Model identifier recorded on slim contexts.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPG_CONTEXT_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier for the generation service",
    )


class Settings(BaseSettings):
    """Main settings aggregating all configuration domains.

    Attributes:
        app_name: Tagged on every log event as ``app``.
        debug: Force DEBUG logging regardless of ``log_level``.
        log_level: Application logging level.
        json_logs: Emit JSON logs instead of console output.
        log_file: Append log events to this file instead of stderr.
        default_setting_description: Fallback world description.
        experience_point_values_path: YAML file holding the XP table.
        memory: Memory recall settings.
        summaries: Transcript windowing settings.
        ai: Generation-service settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPG_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="RPG Prompt Context Builder",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Force DEBUG logging",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )
    log_file: Path | None = Field(
        default=None,
        description="File receiving log events",
    )
    default_setting_description: str | None = Field(
        default=None,
        description="Setting description used when no active setting is available",
    )
    experience_point_values_path: Path = Field(
        default=DEFAULT_EXPERIENCE_POINT_VALUES_PATH,
        description="YAML resource holding experience point values",
    )

    memory: MemorySettings = Field(default_factory=MemorySettings)
    summaries: SummarySettings = Field(default_factory=SummarySettings)
    ai: AISettings = Field(default_factory=AISettings)

    @property
    def max_memories_to_recall(self) -> int:
        return self.memory.max_memories_to_recall


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If the configuration cannot be loaded.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "AISettings",
    "MemorySettings",
    "Settings",
    "SummarySettings",
    "clear_settings_cache",
    "coerce_positive_int",
    "get_settings",
]
