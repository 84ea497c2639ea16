"""Static reference tables merged into every full context.

Gear slots, attributes, dispositions, need bars, rarities and the
experience-point table rarely change, and two of them are expensive to
produce: the attribute definitions come from constructing a template actor
and the experience-point table is read from a YAML resource. Both are
computed once and memoized for the life of the process.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any

import yaml

from rpg_context.context.adapters import guarded, iter_mapping_items, read_field
from rpg_context.context.ports import Rulebook
from rpg_context.core.config import Settings
from rpg_context.core.exceptions import StaticResourceError
from rpg_context.core.logging import get_logger
from rpg_context.models.reference import DispositionDefinitions, GearSlotDefinitions
from rpg_context.models.snapshots import AttributeInfo, DispositionTypeInfo, ExperiencePointValue


logger = get_logger(__name__)

_DIGITS = re.compile(r"(\d+)")


# =============================================================================
# Sorting
# =============================================================================


def natural_sort_key(text: str) -> list[Any]:
    """Case-insensitive sort key that orders embedded numbers numerically.

    Example:
        >>> sorted(["Ring 10", "ring 2", "Amulet"], key=natural_sort_key)
        ['Amulet', 'ring 2', 'Ring 10']
    """
    return [int(part) if part.isdecimal() else part.casefold() for part in _DIGITS.split(text)]


def _clean_names(names: Iterable[Any]) -> list[str]:
    cleaned: list[str] = []
    for name in names:
        if isinstance(name, str) and name.strip() and name.strip() not in cleaned:
            cleaned.append(name.strip())
    return cleaned


# =============================================================================
# Gear Slots
# =============================================================================


def gear_slot_types(definitions: GearSlotDefinitions | None) -> list[str]:
    """Slot types (e.g. "hand", "ring"), naturally sorted."""
    if definitions is None:
        return []
    return sorted(_clean_names(definitions.by_type.keys()), key=natural_sort_key)


def gear_slot_names(definitions: GearSlotDefinitions | None) -> list[str]:
    """Every named slot from both slot indexes, deduplicated and naturally sorted."""
    if definitions is None:
        return []
    names: list[Any] = []
    for slot_names in definitions.by_type.values():
        names.extend(slot_names)
    names.extend(definitions.by_name.keys())
    return sorted(_clean_names(names), key=natural_sort_key)


# =============================================================================
# Experience Points
# =============================================================================


def _xp_entry(action: Any, value: Any) -> ExperiencePointValue | None:
    action_text = "" if action is None else str(action).strip()
    if not action_text:
        return None
    value_text = "" if value is None else str(value).strip()
    return ExperiencePointValue(action=action_text, value=value_text)


def parse_experience_point_values(parsed: Any) -> list[ExperiencePointValue]:
    """Read the experience-point table from parsed YAML.

    The document may be a mapping of ``action: value`` pairs or a list whose
    items are such mappings, ``"action: value"`` strings, or bare action
    strings (with an empty value). Non-string actions such as numeric YAML
    keys are stringified.
    """
    pairs: list[tuple[Any, Any]] = []
    if isinstance(parsed, list):
        for entry in parsed:
            if entry is None:
                continue
            if isinstance(entry, Mapping):
                pairs.extend(iter_mapping_items(entry))
                continue
            text = str(entry).strip()
            if not text:
                continue
            action, separator, value = text.partition(":")
            pairs.append((action, value if separator else ""))
    elif isinstance(parsed, Mapping):
        pairs.extend(iter_mapping_items(parsed))

    values: list[ExperiencePointValue] = []
    for action, value in pairs:
        entry = _xp_entry(action, value)
        if entry is not None:
            values.append(entry)
    return values


def _read_yaml(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise StaticResourceError(
            f"Failed to read static resource: {exc}",
            resource=str(path),
        ) from exc


@lru_cache(maxsize=None)
def load_experience_point_values(path: Path) -> tuple[ExperiencePointValue, ...]:
    """Load the experience-point table once per resource path.

    A missing or unreadable resource yields an empty table.
    """
    if not path.exists():
        logger.debug("Experience point table not found", resource=str(path))
        return ()
    try:
        parsed = _read_yaml(path)
    except StaticResourceError as exc:
        logger.warning(
            "Failed to load experience point values",
            operation="load_experience_point_values",
            error=str(exc),
        )
        return ()
    values = tuple(parse_experience_point_values(parsed))
    logger.info("Experience point table loaded", resource=str(path), entries=len(values))
    return values


# =============================================================================
# Table Facade
# =============================================================================


def _attribute_info(name: str, definition: Any) -> AttributeInfo:
    description = read_field(definition, "description") or read_field(definition, "label") or name
    return AttributeInfo(description=str(description))


def _as_model(value: Any, model: type[Any]) -> Any:
    if value is None or isinstance(value, model):
        return value
    return model.model_validate(value)


class StaticTables:
    """Reference tables drawn from a :class:`Rulebook` and packaged resources.

    One instance lives as long as the assembler that owns it, so the
    attribute definitions are computed once per assembler.

    Args:
        rulebook: Host rule tables.
        settings: Supplies the experience-point resource path.
    """

    def __init__(self, rulebook: Rulebook, settings: Settings) -> None:
        self.rulebook = rulebook
        self.settings = settings

    @cached_property
    def attribute_definitions(self) -> dict[str, AttributeInfo]:
        """Attribute name -> description, read from a template actor."""
        try:
            template = self.rulebook.create_attribute_template()
            return {
                name: _attribute_info(name, definition)
                for name, definition in iter_mapping_items(read_field(template, "attribute_definitions"))
                if isinstance(name, str)
            }
        except Exception as exc:
            logger.warning(
                "Failed to load attribute definitions",
                operation="attribute_definitions",
                error=str(exc),
            )
            return {}

    @property
    def attributes(self) -> list[str]:
        """Attribute names, sorted case-insensitively."""
        names = [name for name in self.attribute_definitions if name.strip()]
        return sorted(names, key=str.casefold)

    def disposition_definitions(self) -> DispositionDefinitions:
        definitions = guarded(
            "disposition_definitions",
            None,
            lambda: _as_model(self.rulebook.disposition_definitions(), DispositionDefinitions),
        )
        return definitions or DispositionDefinitions()

    @staticmethod
    def disposition_types(definitions: DispositionDefinitions) -> list[DispositionTypeInfo]:
        return [
            DispositionTypeInfo(
                key=definition.key,
                name=definition.display_name,
                description=definition.description,
                move_up=definition.move_up,
                move_down=definition.move_down,
                move_way_down=definition.move_way_down,
            )
            for definition in definitions.types.values()
        ]

    def gear_slot_definitions(self) -> GearSlotDefinitions | None:
        return guarded(
            "gear_slot_definitions",
            None,
            lambda: _as_model(self.rulebook.gear_slot_definitions(), GearSlotDefinitions),
        )

    def need_bar_definitions(self) -> list[Any]:
        definitions = guarded("need_bar_definitions", [], self.rulebook.need_bar_definitions)
        return list(definitions or [])

    def rarity_definitions(self) -> Any:
        return guarded("rarity_definitions", None, self.rulebook.rarity_definitions)

    def generated_rarity(self) -> Any:
        return guarded("generate_random_rarity", None, self.rulebook.generate_random_rarity)

    def experience_point_values(self) -> list[ExperiencePointValue]:
        values = guarded(
            "experience_point_values",
            (),
            load_experience_point_values,
            Path(self.settings.experience_point_values_path),
        )
        return list(values)


__all__ = [
    "StaticTables",
    "gear_slot_names",
    "gear_slot_types",
    "load_experience_point_values",
    "natural_sort_key",
    "parse_experience_point_values",
]
