"""Game setting description.

The active setting (world name, theme, tone, races, currency, ...) is
serialized by the host and condensed here into a :class:`SettingContext`
plus a one-paragraph description for prompts.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from rpg_context.context.adapters import as_mapping, call_capability, read_field
from rpg_context.core.constants import DEFAULT_SETTING_DESCRIPTION
from rpg_context.models.snapshots import SettingContext


_LINE_SPLIT = re.compile(r"\r?\n")

_SCALAR_FIELDS = (
    "name",
    "theme",
    "genre",
    "starting_location_type",
    "magic_level",
    "tech_level",
    "tone",
    "difficulty",
    "currency_name",
    "currency_name_plural",
    "currency_value_notes",
    "writing_style_notes",
)


def active_setting_snapshot(setting: Any) -> dict[str, Any] | None:
    """Serialize the active setting through its ``to_json()`` capability, if any."""
    if setting is None:
        return None
    snapshot = call_capability(setting, "to_json")
    if snapshot:
        return as_mapping(snapshot)
    if isinstance(setting, Mapping):
        return dict(setting)
    return None


def _fallback_description(default_description: str | None) -> str:
    if isinstance(default_description, str) and default_description.strip():
        return default_description.strip()
    return DEFAULT_SETTING_DESCRIPTION


def describe_setting(snapshot: Any, default_description: str | None = None) -> str:
    """Describe a setting in one paragraph.

    Args:
        snapshot: Serialized setting, or None.
        default_description: Configured description used when the setting
            has nothing to say.

    Returns:
        The description, e.g. ``"Eldoria - high fantasy / adventure A land of
        legends. Key traits: tone heroic, magic high. Common starting
        location: village."``.
    """
    if not snapshot:
        return _fallback_description(default_description)

    sections: list[str] = []
    title_parts: list[str] = []
    name = read_field(snapshot, "name")
    if name:
        title_parts.append(str(name))
    theme_genre = " / ".join(
        part.strip()
        for part in (read_field(snapshot, "theme"), read_field(snapshot, "genre"))
        if isinstance(part, str) and part.strip()
    )
    if theme_genre:
        title_parts.append(theme_genre)
    if title_parts:
        sections.append(" - ".join(title_parts))

    description = read_field(snapshot, "description")
    if description:
        sections.append(str(description))

    traits = [
        f"{label} {value}"
        for label, value in (
            ("tone", read_field(snapshot, "tone")),
            ("difficulty", read_field(snapshot, "difficulty")),
            ("magic", read_field(snapshot, "magic_level")),
            ("technology", read_field(snapshot, "tech_level")),
        )
        if value
    ]
    if traits:
        sections.append(f"Key traits: {', '.join(traits)}.")

    starting_location = read_field(snapshot, "starting_location_type")
    if starting_location:
        sections.append(f"Common starting location: {starting_location}.")

    text = " ".join(sections).strip()
    return text or _fallback_description(default_description)


def normalize_setting_value(value: Any, fallback: str = "") -> str:
    """Strings pass through, numbers and booleans are stringified, the rest falls back."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return fallback


def normalize_setting_list(value: Any) -> list[str]:
    """Trimmed, case-insensitively deduplicated entries of a list or multi-line string."""
    if isinstance(value, (list, tuple)):
        raw_entries = list(value)
    elif isinstance(value, str):
        raw_entries = _LINE_SPLIT.split(value)
    else:
        return []

    seen: set[str] = set()
    result: list[str] = []
    for entry in raw_entries:
        if not isinstance(entry, str):
            continue
        trimmed = entry.strip()
        if not trimmed or trimmed.lower() in seen:
            continue
        seen.add(trimmed.lower())
        result.append(trimmed)
    return result


def build_setting_context(snapshot: Any, description_fallback: str | None = None) -> SettingContext:
    """Normalize a serialized setting into a :class:`SettingContext`."""
    fallback = description_fallback or describe_setting(snapshot)
    fields = {name: normalize_setting_value(read_field(snapshot, name)) for name in _SCALAR_FIELDS}
    description = normalize_setting_value(read_field(snapshot, "description"), fallback)
    return SettingContext(
        **fields,
        description=description or fallback,
        races=normalize_setting_list(read_field(snapshot, "available_races")),
    )


__all__ = [
    "active_setting_snapshot",
    "build_setting_context",
    "describe_setting",
    "normalize_setting_list",
    "normalize_setting_value",
]
