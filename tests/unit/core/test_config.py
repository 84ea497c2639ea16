"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from rpg_context.core.config import (
    MemorySettings,
    Settings,
    SummarySettings,
    clear_settings_cache,
    coerce_positive_int,
    get_settings,
)
from rpg_context.core.constants import DEFAULT_EXPERIENCE_POINT_VALUES_PATH
from rpg_context.core.exceptions import ConfigurationError


class TestCoercePositiveInt:
    """Tests for lenient integer coercion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5, 5),
            ("12", 12),
            (" 7 ", 7),
            (4.0, 4),
            (0, 10),
            (-3, 10),
            (2.5, 10),
            ("abc", 10),
            ("", 10),
            (True, 10),
            (None, 10),
            ([3], 10),
        ],
    )
    def test_coercion(self, value: object, expected: int) -> None:
        assert coerce_positive_int(value, 10) == expected


class TestMemorySettings:
    """Tests for MemorySettings configuration."""

    def test_default_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert MemorySettings().max_memories_to_recall == 10

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the recall cap is read from the environment."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RPG_CONTEXT_MEMORY_MAX_MEMORIES_TO_RECALL", "4")

        assert MemorySettings().max_memories_to_recall == 4

    @pytest.mark.parametrize("raw", ["abc", "0", "-5"])
    def test_invalid_env_falls_back(
        self,
        raw: str,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test invalid caps become the default instead of raising."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RPG_CONTEXT_MEMORY_MAX_MEMORIES_TO_RECALL", raw)

        assert MemorySettings().max_memories_to_recall == 10


class TestSummarySettings:
    """Tests for transcript windowing settings."""

    def test_disabled_by_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = SummarySettings()

        assert settings.max_unsummarized_log_entries == 0
        assert settings.max_summarized_log_entries == 0

    def test_invalid_values_disable(self) -> None:
        settings = SummarySettings(max_unsummarized_log_entries="-2", max_summarized_log_entries=1.5)

        assert settings.max_unsummarized_log_entries == 0
        assert settings.max_summarized_log_entries == 0

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RPG_CONTEXT_SUMMARY_MAX_UNSUMMARIZED_LOG_ENTRIES", "6")

        assert SummarySettings().max_unsummarized_log_entries == 6


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "RPG Prompt Context Builder"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.default_setting_description is None
        assert settings.experience_point_values_path == DEFAULT_EXPERIENCE_POINT_VALUES_PATH
        assert settings.max_memories_to_recall == 10
        assert settings.ai.model == "gpt-4o-mini"

    def test_debug_mode(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RPG_CONTEXT_DEBUG", "true")
        monkeypatch.chdir(tmp_path)

        assert Settings().debug is True

    def test_logging_fields(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert Settings().log_file is None
        assert Settings().json_logs is False

        monkeypatch.setenv("RPG_CONTEXT_LOG_FILE", str(tmp_path / "context.log"))
        monkeypatch.setenv("RPG_CONTEXT_JSON_LOGS", "true")

        settings = Settings()
        assert settings.log_file == tmp_path / "context.log"
        assert settings.json_logs is True

    def test_nested_override(self) -> None:
        settings = Settings(memory=MemorySettings(max_memories_to_recall=3))
        assert settings.max_memories_to_recall == 3


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_cached_instance(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        first = get_settings()

        clear_settings_cache()

        assert get_settings() is not first

    def test_invalid_configuration_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unparseable settings surface as ConfigurationError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RPG_CONTEXT_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()

        assert "original_error" in exc_info.value.details
