"""Pytest configuration and shared fixtures.

This module provides a small fake game world (locations, regions, actors,
things, history) plus settings and rulebook fixtures shared by the unit and
integration tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest

from rpg_context.context.ports import StaticRulebook, WorldSources
from rpg_context.core.config import MemorySettings, Settings, SummarySettings
from rpg_context.models.reference import (
    AttributeDefinition,
    DispositionDefinitions,
    GearSlotDefinitions,
)


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from rpg_context.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Settings with small memory and transcript budgets."""
    return Settings(
        memory=MemorySettings(max_memories_to_recall=2),
        summaries=SummarySettings(max_unsummarized_log_entries=2, max_summarized_log_entries=1),
    )


# =============================================================================
# Fake World Objects
# =============================================================================


@dataclass
class FakeLocation:
    """A location exposing a details view, like the game's Location class."""

    id: str
    name: str
    description: str = ""
    npc_ids: list[str] = field(default_factory=list)
    exits: dict[str, Any] = field(default_factory=dict)
    status_effects: list[Any] = field(default_factory=list)
    stub_metadata: dict[str, Any] | None = None

    def get_details(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "exits": self.exits,
            "npc_ids": self.npc_ids,
        }


@dataclass
class FakeRegion:
    id: str
    name: str
    description: str = ""
    location_ids: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location_ids": list(self.location_ids),
        }


@dataclass
class FakeActor:
    """An actor with a status block and optional party/disposition capabilities."""

    id: str
    name: str
    description: str = ""
    status: dict[str, Any] = field(default_factory=dict)
    current_location: str | None = None
    party_ids: list[str] = field(default_factory=list)
    dispositions: dict[str, dict[str, float]] = field(default_factory=dict)
    is_npc: bool = True

    def get_status(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, **self.status}

    def get_party_members(self) -> list[str]:
        return list(self.party_ids)


@dataclass
class FakeSetting:
    data: dict[str, Any]

    def to_json(self) -> dict[str, Any]:
        return dict(self.data)


@dataclass
class FakeWorld:
    """Mutable world state behind a :class:`WorldSources` bundle."""

    player: Any = None
    history: list[Any] = field(default_factory=list)
    locations: dict[str, Any] = field(default_factory=dict)
    regions: dict[str, Any] = field(default_factory=dict)
    things: dict[str, Any] = field(default_factory=dict)
    actors: dict[str, Any] = field(default_factory=dict)
    skills: dict[str, Any] = field(default_factory=dict)
    turn_token: Any = None
    setting: Any = None

    def sources(self) -> WorldSources:
        return WorldSources(
            current_player=lambda: self.player,
            chat_history=lambda: self.history,
            locations=lambda: self.locations,
            regions=lambda: self.regions,
            things=lambda: self.things,
            actors=lambda: self.actors,
            skills=lambda: self.skills,
            current_turn_token=lambda: self.turn_token,
            current_setting=lambda: self.setting,
        )


# =============================================================================
# World Fixtures
# =============================================================================


@pytest.fixture
def rulebook() -> StaticRulebook:
    """Rulebook with one disposition type, a few gear slots and attributes."""
    return StaticRulebook(
        dispositions=DispositionDefinitions.model_validate(
            {
                "types": {
                    "trust": {
                        "key": "trust",
                        "label": "Trust",
                        "description": "How much the character trusts the player",
                        "moveUp": ["kept a promise"],
                        "intensities": [
                            {"minValue": -100, "name": "hostile"},
                            {"minValue": 0, "name": "neutral"},
                            {"minValue": 50, "name": "friendly"},
                        ],
                    }
                },
                "range": {"min": -100, "max": 100},
            }
        ),
        gear_slots=GearSlotDefinitions(
            by_type={"ring": ["Ring 10", "Ring 2"], "hand": ["Main Hand"]},
            by_name={"Main Hand": {}, "Head": {}},
        ),
        attributes={
            "strength": AttributeDefinition(label="Strength", description="Raw physical power"),
            "Agility": AttributeDefinition(label="Agility"),
        },
        rarities=["common"],
    )


@pytest.fixture
def world() -> FakeWorld:
    """A harbor town with a merchant, a companion and some history."""
    market = FakeLocation(
        id="loc-market",
        name="Harbor Market",
        description="Stalls crowd the quay.",
        npc_ids=["npc-merchant", "npc-missing"],
        exits={
            "north": {"name": "Old Town"},
            "sea": {"name": "Ferry", "is_vehicle": True, "vehicle_type": "boat"},
        },
        status_effects=["Crowded"],
    )
    old_town = FakeLocation(id="loc-old-town", name="Old Town", description="Narrow lanes.")

    merchant = FakeActor(
        id="npc-merchant",
        name="Mira",
        description="A sharp-eyed trader.",
        status={
            "class": "Merchant",
            "important_memories": ["Sold the hero a map", "  ", "Owes the guild money", "Saw a ghost ship"],
            "skills": {"Haggling": 4, "Aim": 1},
        },
        dispositions={"player-1": {"trust": 60}},
    )
    companion = FakeActor(
        id="npc-companion",
        name="Bram",
        status={"important_memories": ["Swore to protect the hero"]},
    )
    player = FakeActor(
        id="player-1",
        name="Ayla",
        status={
            "class": "Ranger",
            "race": "Elf",
            "health": 18,
            "max_health": 20,
            "level": 3,
            "skills": {"Lockpicking": 1, "Basic Swordplay": 5, "Aim": 1},
            "inventory": [{"name": "Longbow", "equipped_slot": "Main Hand", "metadata": {"value": 50}}],
            "gear": {"Main Hand": {"item_id": "thing-bow"}, "Head": None},
            "currency": 12,
        },
        current_location="loc-market",
        party_ids=["npc-companion"],
        is_npc=False,
    )

    return FakeWorld(
        player=player,
        history=[
            {"role": "user", "content": "I arrive at the harbor.", "summary": "Ayla arrived."},
            {"role": "assistant", "content": "Gulls cry overhead.", "summary": "Gulls cried."},
            {
                "role": "user",
                "content": "I browse the stalls.",
                "summary": "Ayla browsed.",
                "type": "player-action",
                "locationId": "loc-market",
                "metadata": {"npcNames": ["Mira"]},
            },
            {"role": "assistant", "content": "Mira waves you over."},
            {"role": "user", "content": "I greet Mira.", "turnId": "turn-4"},
        ],
        locations={"loc-market": market, "loc-old-town": old_town},
        regions={"reg-coast": FakeRegion(id="reg-coast", name="Saltcoast", location_ids=["loc-market", "loc-old-town"])},
        things={
            "thing-crate": {"name": "Crate", "metadata": {"location_id": "loc-market"}},
            "thing-bow": {"name": "Longbow", "metadata": {"location_id": "loc-market", "owner_id": "player-1"}},
            "thing-statue": {"name": "Statue", "type": "Scenery", "metadata": {"location_id": "loc-old-town"}},
        },
        actors={"player-1": player, "npc-merchant": merchant, "npc-companion": companion},
        skills={"haggling": {"description": "Talking prices down"}},
        setting=FakeSetting(
            {
                "name": "Saltcoast",
                "theme": "maritime",
                "genre": "fantasy",
                "description": "Storm-battered islands.",
                "tone": "wry",
                "available_races": ["Human", "Elf", "human"],
            }
        ),
    )
