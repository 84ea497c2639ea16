"""Tests for setting description and normalization."""

from __future__ import annotations

from rpg_context.context.setting import (
    active_setting_snapshot,
    build_setting_context,
    describe_setting,
    normalize_setting_list,
    normalize_setting_value,
)


class TestDescribeSetting:
    """Tests for the one-paragraph setting description."""

    def test_full_description(self) -> None:
        snapshot = {
            "name": "Eldoria",
            "theme": "high fantasy",
            "genre": " adventure ",
            "description": "A land of legends.",
            "tone": "heroic",
            "magic_level": "high",
            "starting_location_type": "village",
        }
        assert describe_setting(snapshot) == (
            "Eldoria - high fantasy / adventure A land of legends. "
            "Key traits: tone heroic, magic high. Common starting location: village."
        )

    def test_no_setting_uses_configured_default(self) -> None:
        assert describe_setting(None, "  A drowned world.  ") == "A drowned world."

    def test_no_setting_no_default(self) -> None:
        assert describe_setting(None) == "A rich fantasy world filled with adventure."

    def test_empty_setting_falls_back(self) -> None:
        assert describe_setting({"theme": "  "}) == "A rich fantasy world filled with adventure."


class TestSettingContext:
    """Tests for setting context normalization."""

    def test_scalars_and_races(self) -> None:
        context = build_setting_context(
            {"name": "Eldoria", "magic_level": 3, "tone": True, "available_races": "Elf\nelf\r\nDwarf\n"}
        )
        assert context.name == "Eldoria"
        assert context.magic_level == "3"
        assert context.tone == "true"
        assert context.races == ["Elf", "Dwarf"]

    def test_description_fallback(self) -> None:
        context = build_setting_context({"name": "Eldoria"}, "Fallback text")
        assert context.description == "Fallback text"

    def test_no_setting(self) -> None:
        context = build_setting_context(None)
        assert context.name == ""
        assert context.description == "A rich fantasy world filled with adventure."
        assert context.races == []

    def test_value_helpers(self) -> None:
        assert normalize_setting_value(None, "x") == "x"
        assert normalize_setting_value(["list"], "x") == "x"
        assert normalize_setting_list(["Orc", 5, " orc ", ""]) == ["Orc"]


class TestActiveSetting:
    def test_serializes_through_capability(self) -> None:
        class Setting:
            def to_json(self) -> dict[str, str]:
                return {"name": "Eldoria"}

        assert active_setting_snapshot(Setting()) == {"name": "Eldoria"}

    def test_mapping_and_none(self) -> None:
        assert active_setting_snapshot({"name": "Plain"}) == {"name": "Plain"}
        assert active_setting_snapshot(None) is None
