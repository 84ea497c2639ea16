"""Pydantic models for context snapshots, history entries and rule definitions."""

from __future__ import annotations

from rpg_context.models.history import HistoryEntry, coerce_history
from rpg_context.models.reference import (
    AttributeDefinition,
    DispositionDefinitions,
    DispositionTypeDefinition,
    GearSlotDefinitions,
    IntensityLevel,
)
from rpg_context.models.snapshots import (
    ActorSnapshot,
    AttributeInfo,
    ContextSnapshot,
    DispositionEntry,
    DispositionTypeInfo,
    ExitSummary,
    ExperiencePointValue,
    GearSlotEntry,
    ItemSnapshot,
    LocationContext,
    MemorySelectionEntry,
    Personality,
    PlayerSnapshot,
    RegionContext,
    RegionLocation,
    SettingContext,
    SkillEntry,
    SlimContextSnapshot,
    SlimExit,
    SlimItem,
    SlimLocation,
    SlimNpc,
    SlimPlayer,
    SlimSetting,
    StatusEffect,
)


__all__ = [
    # History
    "HistoryEntry",
    "coerce_history",
    # Rule definitions
    "AttributeDefinition",
    "DispositionDefinitions",
    "DispositionTypeDefinition",
    "GearSlotDefinitions",
    "IntensityLevel",
    # Snapshots
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
    "StatusEffect",
]
