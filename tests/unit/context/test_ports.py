"""Tests for the world and rulebook ports."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from rpg_context.context.ports import (
    AttributeTemplate,
    DetailsSource,
    DispositionSource,
    NeedBarSource,
    PartySource,
    SkillSource,
    StaticRulebook,
    StatusEffectSource,
    StatusProvider,
    WorldSources,
)


if TYPE_CHECKING:
    from conftest import FakeWorld


class TestCapabilityProtocols:
    """World objects are matched structurally against the capability protocols."""

    def test_fake_actor_capabilities(self, world: FakeWorld) -> None:
        player = world.player

        assert isinstance(player, StatusProvider)
        assert isinstance(player, PartySource)
        assert not isinstance(player, SkillSource)
        assert not isinstance(player, StatusEffectSource)
        assert not isinstance(player, NeedBarSource)
        assert not isinstance(player, DispositionSource)

    def test_location_details(self, world: FakeWorld) -> None:
        assert isinstance(world.locations["loc-market"], DetailsSource)
        assert not isinstance({"name": "Plain"}, DetailsSource)


class TestWorldSources:
    def test_defaults_are_empty(self) -> None:
        sources = WorldSources()

        assert sources.current_player() is None
        assert sources.chat_history() == []
        assert sources.actors() == {}
        assert sources.location_lookup is None


class TestStaticRulebook:
    """Tests for the plain-data rulebook."""

    def test_intensity_buckets(self, rulebook: StaticRulebook) -> None:
        assert rulebook.resolve_disposition_intensity("trust", -100) == "hostile"
        assert rulebook.resolve_disposition_intensity("trust", 49) == "neutral"
        assert rulebook.resolve_disposition_intensity("trust", 50) == "friendly"
        assert rulebook.resolve_disposition_intensity("trust", -101) is None
        assert rulebook.resolve_disposition_intensity("fear", 10) is None

    def test_attribute_template(self, rulebook: StaticRulebook) -> None:
        template = rulebook.create_attribute_template()

        assert isinstance(template, AttributeTemplate)
        assert set(template.attribute_definitions) == {"strength", "Agility"}

    def test_random_rarity(self) -> None:
        rules = StaticRulebook(rarities=["common", "rare"], rng=random.Random(7))

        assert rules.generate_random_rarity() in {"common", "rare"}
        assert StaticRulebook().generate_random_rarity() is None
