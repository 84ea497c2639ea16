"""Rule-definition models supplied by the host game.

These describe the *input* side of the static reference tables: disposition
types and their intensity buckets, gear slots and attribute definitions.
Keys may arrive camelCased from JSON/YAML rule files, so aliases are
generated.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RuleModel(BaseModel):
    """Base class for rule definitions."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class IntensityLevel(RuleModel):
    """A named bucket starting at ``min_value`` (inclusive)."""

    min_value: float
    name: str


class DispositionTypeDefinition(RuleModel):
    """A kind of attitude an actor can hold toward the player.

    Attributes:
        key: Stable identifier (e.g. "trust").
        label: Display name; defaults to the key.
        description: What the disposition measures.
        move_up: Events that raise it.
        move_down: Events that lower it.
        move_way_down: Events that lower it sharply.
        intensities: Buckets ordered by ``min_value``.
    """

    key: str
    label: str | None = None
    description: str = ""
    move_up: list[Any] = Field(default_factory=list)
    move_down: list[Any] = Field(default_factory=list)
    move_way_down: list[Any] = Field(default_factory=list)
    intensities: list[IntensityLevel] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.label or self.key

    def resolve_intensity(self, value: float) -> str | None:
        """Return the highest bucket whose threshold ``value`` reaches."""
        match: str | None = None
        for level in sorted(self.intensities, key=lambda level: level.min_value):
            if value >= level.min_value:
                match = level.name
        return match


class DispositionDefinitions(RuleModel):
    """All disposition types plus the numeric range they share."""

    types: dict[str, DispositionTypeDefinition] = Field(default_factory=dict)
    range: dict[str, Any] = Field(default_factory=dict)


class GearSlotDefinitions(RuleModel):
    """Equipment slots grouped by slot type and indexed by slot name."""

    by_type: dict[str, list[str]] = Field(default_factory=dict)
    by_name: dict[str, Any] = Field(default_factory=dict)


class AttributeDefinition(RuleModel):
    label: str | None = None
    description: str | None = None


__all__ = [
    "AttributeDefinition",
    "DispositionDefinitions",
    "DispositionTypeDefinition",
    "GearSlotDefinitions",
    "IntensityLevel",
    "RuleModel",
]
