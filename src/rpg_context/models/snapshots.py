"""Canonical snapshot models handed to the text-generation service.

Every model here is the *output* side of context assembly: the normalizer
reconciles loosely-shaped world objects into these types, and the assembler
composes them into a :class:`ContextSnapshot` (or the reduced
:class:`SlimContextSnapshot`). Snapshots are frozen; the only post-build
adjustment, attaching selected memories, goes through ``model_copy``.

NEURO-SYMBOLIC PRINCIPLE:
The world state is the source of truth. These snapshots are read-only
projections of it and are rebuilt from scratch on every build.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Base
# =============================================================================


class Snapshot(BaseModel):
    """Base class for all snapshot models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )


Scalar = int | float | str | None


# =============================================================================
# Actor Components
# =============================================================================


class StatusEffect(Snapshot):
    """A temporary or indefinite condition on an actor, item or place.

    Attributes:
        description: What the effect is (never empty).
        duration: Remaining turns, or None for an indefinite effect.
    """

    description: str = Field(min_length=1, description="Effect description")
    duration: int | None = Field(default=1, ge=0, description="Remaining turns (None = indefinite)")


class SkillEntry(Snapshot):
    """A skill worth mentioning in the prompt."""

    name: str
    value: int | float | None = None
    description: str = ""


class Personality(Snapshot):
    """Merged personality of an actor.

    ``type``, ``traits`` and ``notes`` are comma-joined flattenings of
    whatever structure the source held; ``goals`` keeps order and drops
    duplicates.
    """

    type: str | None = None
    traits: str | None = None
    notes: str | None = None
    goals: list[str] = Field(default_factory=list)


class DispositionEntry(Snapshot):
    """An actor's attitude toward the current player for one disposition type."""

    type: str = Field(description="Disposition type label")
    value: int | float = Field(default=0, description="Raw disposition value")
    intensity_name: str | None = Field(default=None, description="Named intensity bucket")


class MemorySelectionEntry(Snapshot):
    """One memory chosen for recall.

    Attributes:
        index: 0-based position in the actor's memory list.
        display_index: ``index + 1`` for human-facing numbering.
        memory: The memory text.
    """

    index: int = Field(ge=0)
    display_index: int = Field(ge=1)
    memory: str

    @classmethod
    def at(cls, index: int, memory: str) -> MemorySelectionEntry:
        return cls(index=index, display_index=index + 1, memory=memory)


class GearSlotEntry(Snapshot):
    """An equipment slot and the item occupying it, if any."""

    slot: str
    item_id: str | None = None


# =============================================================================
# Items and Places
# =============================================================================


class ItemSnapshot(Snapshot):
    """Canonical view of an item or piece of scenery.

    Attributes:
        name: Display name.
        description: Free-text description.
        status_effects: Effects currently on the item.
        equipped_slot: Gear slot the item occupies, if equipped.
        is_scenery: True for non-portable background detail.
        thing_type: Lowercased item type ("scenery" is inferred for scenery).
        rarity: Rarity label, if any.
        attribute_bonuses: Raw attribute bonus entries.
        cause_status_effect: Effect the item inflicts, if any.
        value: Value from item metadata.
        weight: Weight from item metadata.
        properties: Free-form properties from item metadata.
    """

    name: str
    description: str = ""
    status_effects: list[StatusEffect] = Field(default_factory=list)
    equipped_slot: str | None = None
    is_scenery: bool = False
    thing_type: str | None = None
    rarity: Any = None
    attribute_bonuses: list[Any] = Field(default_factory=list)
    cause_status_effect: Any = None
    value: Any = None
    weight: Any = None
    properties: Any = None


class ExitSummary(Snapshot):
    """An exit leading out of the current location."""

    name: str | None = None
    is_vehicle: bool = False
    vehicle_type: str | None = None


class LocationContext(Snapshot):
    """The location the current turn takes place in."""

    name: str
    description: str
    status_effects: list[StatusEffect] = Field(default_factory=list)
    exits: list[ExitSummary] = Field(default_factory=list)


class RegionLocation(Snapshot):
    """A location listed under the current region."""

    id: str
    name: str
    description: str = ""


class RegionContext(Snapshot):
    """The region containing the current location."""

    name: str
    description: str
    status_effects: list[StatusEffect] = Field(default_factory=list)
    locations: list[RegionLocation] = Field(default_factory=list)


class SettingContext(Snapshot):
    """Normalized description of the active game setting."""

    name: str = ""
    description: str = ""
    theme: str = ""
    genre: str = ""
    starting_location_type: str = ""
    magic_level: str = ""
    tech_level: str = ""
    tone: str = ""
    difficulty: str = ""
    currency_name: str = ""
    currency_name_plural: str = ""
    currency_value_notes: str = ""
    writing_style_notes: str = ""
    races: list[str] = Field(default_factory=list)


# =============================================================================
# Actors
# =============================================================================


class PlayerSnapshot(Snapshot):
    """The current player as seen by the generation service."""

    name: str
    description: str = ""
    health: Scalar = None
    max_health: Scalar = None
    level: Scalar = None
    class_name: str | None = Field(default=None, alias="class")
    race: str | None = None
    status_effects: list[StatusEffect] = Field(default_factory=list)
    inventory: list[ItemSnapshot] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)
    gear: list[GearSlotEntry] = Field(default_factory=list)
    personality: Personality = Field(default_factory=Personality)
    currency: Scalar = 0
    need_bars: list[dict[str, Any]] = Field(default_factory=list)


class ActorSnapshot(Snapshot):
    """A non-player character or party member.

    ``important_memories`` is the full sanitized list; the bounded subset
    actually surfaced this turn lives in ``selected_important_memories``.
    """

    id: str | None = None
    name: str
    description: str = ""
    class_name: str | None = Field(default=None, alias="class")
    race: str | None = None
    level: Scalar = None
    health: Scalar = None
    max_health: Scalar = None
    status_effects: list[StatusEffect] = Field(default_factory=list)
    inventory: list[ItemSnapshot] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)
    personality: Personality = Field(default_factory=Personality)
    dispositions_toward_player: list[DispositionEntry] = Field(default_factory=list)
    need_bars: list[dict[str, Any]] = Field(default_factory=list)
    important_memories: list[str] = Field(default_factory=list)
    selected_important_memories: list[MemorySelectionEntry] = Field(default_factory=list)


# =============================================================================
# Reference Tables
# =============================================================================


class DispositionTypeInfo(Snapshot):
    """A disposition type as described to the generation service."""

    key: str
    name: str
    description: str = ""
    move_up: list[Any] = Field(default_factory=list)
    move_down: list[Any] = Field(default_factory=list)
    move_way_down: list[Any] = Field(default_factory=list)


class AttributeInfo(Snapshot):
    description: str


class ExperiencePointValue(Snapshot):
    """One row of the experience-point reference table."""

    action: str = Field(min_length=1)
    value: str = ""


# =============================================================================
# Root Snapshots
# =============================================================================


class ContextSnapshot(Snapshot):
    """Full per-turn context consumed by the text-generation service."""

    setting: SettingContext = Field(default_factory=SettingContext)
    game_history: str
    current_region: RegionContext
    current_location: LocationContext
    current_player: PlayerSnapshot
    npcs: list[ActorSnapshot] = Field(default_factory=list)
    party: list[ActorSnapshot] = Field(default_factory=list)
    items_in_scene: list[ItemSnapshot] = Field(default_factory=list)
    disposition_types: list[DispositionTypeInfo] = Field(default_factory=list)
    disposition_range: dict[str, Any] = Field(default_factory=dict)
    need_bar_definitions: list[Any] = Field(default_factory=list)
    gear_slots: list[str] = Field(default_factory=list)
    equipment_slots: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    attribute_definitions: dict[str, AttributeInfo] = Field(default_factory=dict)
    rarity_definitions: Any = None
    experience_point_values: list[ExperiencePointValue] = Field(default_factory=list)
    generated_thing_rarity: Any = None
    world_outline: dict[str, list[str]] = Field(default_factory=dict)
    max_memories_to_recall: int = Field(ge=1)


class SlimSetting(Snapshot):
    name: str = ""
    description: str = ""


class SlimExit(Snapshot):
    name: str | None = None


class SlimLocation(Snapshot):
    name: str
    description: str
    exits: list[SlimExit] = Field(default_factory=list)


class SlimItem(Snapshot):
    name: str
    description: str = ""


class SlimSkill(Snapshot):
    name: str
    value: int | float | None = None


class SlimPlayer(Snapshot):
    """Minimal player summary for lower-cost invocations."""

    name: str
    description: str = ""
    health: Scalar = None
    max_health: Scalar = None
    level: Scalar = None
    class_name: str | None = Field(default=None, alias="class")
    race: str | None = None
    inventory: list[SlimItem] = Field(default_factory=list)
    skills: list[SlimSkill] = Field(default_factory=list)


class SlimNpc(Snapshot):
    name: str | None = None
    description: str = ""


class SlimContextSnapshot(Snapshot):
    """Reduced-fidelity context: no memories, dispositions, need bars or outline."""

    setting: SlimSetting = Field(default_factory=SlimSetting)
    game_history: str
    current_location: SlimLocation
    current_player: SlimPlayer
    npcs: list[SlimNpc] = Field(default_factory=list)
    model: str | None = None


__all__ = [
    "ActorSnapshot",
    "AttributeInfo",
    "ContextSnapshot",
    "DispositionEntry",
    "DispositionTypeInfo",
    "ExitSummary",
    "ExperiencePointValue",
    "GearSlotEntry",
    "ItemSnapshot",
    "LocationContext",
    "MemorySelectionEntry",
    "Personality",
    "PlayerSnapshot",
    "RegionContext",
    "RegionLocation",
    "SettingContext",
    "SkillEntry",
    "SlimContextSnapshot",
    "SlimExit",
    "SlimItem",
    "SlimLocation",
    "SlimNpc",
    "SlimPlayer",
    "SlimSetting",
    "Snapshot",
    "StatusEffect",
]
