"""Dependency-injection boundary of the context builder.

The host game supplies world accessors once, as a :class:`WorldSources`
bundle, plus a :class:`Rulebook` describing its static rule tables. The
capability protocols document the optional methods world objects *may*
expose; the normalizer detects each one explicitly via
:func:`~rpg_context.context.adapters.has_capability` and falls back to
plain fields when it is absent.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from rpg_context.models.reference import (
    AttributeDefinition,
    DispositionDefinitions,
    GearSlotDefinitions,
)


# =============================================================================
# Capability Protocols
# =============================================================================


@runtime_checkable
class StatusProvider(Protocol):
    def get_status(self) -> Mapping[str, Any] | None: ...


@runtime_checkable
class StatusEffectSource(Protocol):
    def get_status_effects(self) -> Iterable[Any]: ...


@runtime_checkable
class SkillSource(Protocol):
    def get_skills(self) -> Mapping[str, Any] | None: ...


@runtime_checkable
class NeedBarSource(Protocol):
    def get_need_bar_prompt_context(self, *, include_player_only: bool = False) -> list[Any]: ...


@runtime_checkable
class DispositionSource(Protocol):
    """Actors expose one (or both) of these; the first is preferred."""

    def get_disposition_towards_current_player(self, type_key: str) -> float | None: ...

    def get_disposition(self, player_id: str, type_key: str) -> float | None: ...


@runtime_checkable
class PartySource(Protocol):
    def get_party_members(self) -> Iterable[str]: ...


@runtime_checkable
class DetailsSource(Protocol):
    """Locations may expose a richer details view (name, exits, npc ids)."""

    def get_details(self) -> Mapping[str, Any] | None: ...


# =============================================================================
# World Accessors
# =============================================================================


def _none() -> Any:
    return None


def _empty_list() -> list[Any]:
    return []


def _empty_map() -> dict[Any, Any]:
    return {}


@dataclass
class WorldSources:
    """Zero-argument accessors over the live game world.

    Every accessor is called fresh on each build, so the bundle can be
    created once at startup and reused for the life of the process.

    Attributes:
        current_player: The player whose turn is being resolved.
        chat_history: Append-only chat/event log.
        locations: Location id -> location object.
        regions: Region id -> region object.
        things: Thing id -> item/scenery object.
        actors: Actor id -> player or NPC object.
        skills: Skill name -> skill definition.
        current_turn_token: Explicit turn token, if the caller has one.
        current_setting: The active setting object.
        location_lookup: Fallback lookup for locations missing from ``locations``.
    """

    current_player: Callable[[], Any] = _none
    chat_history: Callable[[], Iterable[Any]] = _empty_list
    locations: Callable[[], Mapping[str, Any]] = _empty_map
    regions: Callable[[], Mapping[str, Any]] = _empty_map
    things: Callable[[], Mapping[str, Any]] = _empty_map
    actors: Callable[[], Mapping[str, Any]] = _empty_map
    skills: Callable[[], Mapping[str, Any]] = _empty_map
    current_turn_token: Callable[[], Any] = _none
    current_setting: Callable[[], Any] = _none
    location_lookup: Callable[[str], Any] | None = None


# =============================================================================
# Rulebook
# =============================================================================


class Rulebook(Protocol):
    """Static rule tables of the host game."""

    def disposition_definitions(self) -> DispositionDefinitions: ...

    def resolve_disposition_intensity(self, type_key: str, value: float) -> str | None: ...

    def need_bar_definitions(self) -> list[Any]: ...

    def gear_slot_definitions(self) -> GearSlotDefinitions | None: ...

    def create_attribute_template(self) -> Any:
        """Construct a throwaway actor whose ``attribute_definitions`` describe all attributes."""
        ...

    def rarity_definitions(self) -> Any: ...

    def generate_random_rarity(self) -> Any: ...


@dataclass
class AttributeTemplate:
    """Stand-in actor carrying only attribute definitions."""

    name: str
    description: str
    attribute_definitions: dict[str, AttributeDefinition] = field(default_factory=dict)


@dataclass
class StaticRulebook:
    """A :class:`Rulebook` backed by plain data.

    Useful for hosts that keep their rules in YAML/JSON and for tests.

    Example:
        >>> rules = StaticRulebook(
        ...     dispositions=DispositionDefinitions.model_validate(
        ...         {"types": {"trust": {"key": "trust", "intensities": [{"minValue": 0, "name": "neutral"}]}}}
        ...     )
        ... )
        >>> rules.resolve_disposition_intensity("trust", 3)
        'neutral'
    """

    dispositions: DispositionDefinitions = field(default_factory=DispositionDefinitions)
    need_bars: list[Any] = field(default_factory=list)
    gear_slots: GearSlotDefinitions = field(default_factory=GearSlotDefinitions)
    attributes: dict[str, AttributeDefinition] = field(default_factory=dict)
    rarities: list[Any] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random)

    def disposition_definitions(self) -> DispositionDefinitions:
        return self.dispositions

    def resolve_disposition_intensity(self, type_key: str, value: float) -> str | None:
        definition = self.dispositions.types.get(type_key)
        if definition is None:
            return None
        return definition.resolve_intensity(value)

    def need_bar_definitions(self) -> list[Any]:
        return list(self.need_bars)

    def gear_slot_definitions(self) -> GearSlotDefinitions | None:
        return self.gear_slots

    def create_attribute_template(self) -> AttributeTemplate:
        return AttributeTemplate(
            name="Attribute Template",
            description="Template loader",
            attribute_definitions=dict(self.attributes),
        )

    def rarity_definitions(self) -> Any:
        return list(self.rarities)

    def generate_random_rarity(self) -> Any:
        if not self.rarities:
            return None
        return self.rng.choice(self.rarities)


__all__ = [
    "AttributeTemplate",
    "DetailsSource",
    "DispositionSource",
    "NeedBarSource",
    "PartySource",
    "Rulebook",
    "SkillSource",
    "StaticRulebook",
    "StatusEffectSource",
    "StatusProvider",
    "WorldSources",
]
