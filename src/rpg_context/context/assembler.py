"""Context assembly.

The :class:`ContextAssembler` is the single entry point of the package. Once
per game turn the host asks it for a :class:`ContextSnapshot` (or the
cheaper :class:`SlimContextSnapshot`) describing everything the
text-generation service needs to narrate the turn: the setting, where the
player is, who is around, what lies in the scene, what happened recently
and the game's static rule tables.

Builds only read the world. Every individual lookup that fails is logged
and replaced by a default, so callers always receive a complete snapshot.

Example:
    >>> assembler = ContextAssembler(sources, StaticRulebook())
    >>> snapshot = assembler.build()
    >>> snapshot.current_location.name
    'Harbor Market'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from rpg_context.context.adapters import (
    MISSING,
    as_list,
    as_mapping,
    call_capability,
    guarded,
    read_field,
)
from rpg_context.context.history import HistoryWindower, location_display_name
from rpg_context.context.memory_cache import MemorySelectionCache, actor_cache_id
from rpg_context.context.normalize import EntityNormalizer, normalize_item, normalize_status_effects
from rpg_context.context.ports import Rulebook, WorldSources
from rpg_context.context.setting import active_setting_snapshot, build_setting_context, describe_setting
from rpg_context.context.tables import StaticTables, gear_slot_names, gear_slot_types
from rpg_context.context.turn_key import TurnKeyResolver
from rpg_context.core.config import Settings, get_settings
from rpg_context.core.constants import (
    EMPTY_HISTORY_TEXT,
    SLIM_PLAYER_NAME,
    UNKNOWN_LOCATION_DESCRIPTION,
    UNKNOWN_LOCATION_NAME,
    UNKNOWN_PLAYER_NAME,
    UNKNOWN_REGION_DESCRIPTION,
    UNKNOWN_REGION_NAME,
)
from rpg_context.core.exceptions import ContextLookupError
from rpg_context.core.logging import get_logger, scoped_context
from rpg_context.models.snapshots import (
    ActorSnapshot,
    ContextSnapshot,
    ExitSummary,
    ItemSnapshot,
    LocationContext,
    PlayerSnapshot,
    RegionContext,
    RegionLocation,
    SettingContext,
    SlimContextSnapshot,
    SlimExit,
    SlimLocation,
    SlimPlayer,
    SlimSetting,
)


logger = get_logger(__name__)


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _first_text(*values: Any) -> str | None:
    for value in values:
        if _text(value):
            return value
    return None


def _get_by_id(records: Mapping[str, Any], record_id: Any) -> Any:
    """Look up a world record; ids that cannot be keys resolve to nothing."""
    try:
        return records.get(record_id)
    except TypeError:
        logger.warning("Skipping unusable world id", operation="lookup_by_id", record_id=repr(record_id))
        return None


def _as_sequence(value: Any) -> list[Any]:
    """Materialize an accessor result as a list; non-iterables and scalars become empty."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return []
    try:
        return list(value)
    except TypeError:
        return []


@dataclass
class WorldView:
    """The world as read at the start of one build."""

    player: Any = None
    history: list[Any] = field(default_factory=list)
    locations: Mapping[str, Any] = field(default_factory=dict)
    regions: Mapping[str, Any] = field(default_factory=dict)
    things: Mapping[str, Any] = field(default_factory=dict)
    actors: Mapping[str, Any] = field(default_factory=dict)
    skills: Mapping[str, Any] = field(default_factory=dict)
    setting: Any = None


@dataclass
class Scene:
    """The resolved location of a build and everything hanging off it."""

    location: Any = None
    details: Any = None
    region: Any = None

    @property
    def location_id(self) -> Any:
        return read_field(self.location, "id")


class ContextAssembler:
    """Assemble per-turn prompt contexts from the live world.

    Args:
        sources: Accessors over the game world.
        rulebook: Static rule tables.
        settings: Runtime configuration; the cached application settings when omitted.
        memory_cache: Memory selection cache; a new one keyed on this
            assembler's turn keys when omitted.
    """

    def __init__(
        self,
        sources: WorldSources,
        rulebook: Rulebook,
        settings: Settings | None = None,
        *,
        memory_cache: MemorySelectionCache | None = None,
    ) -> None:
        self.sources = sources
        self.rulebook = rulebook
        self.settings = settings or get_settings()
        self.turn_keys = TurnKeyResolver(sources)
        self.memory_cache = memory_cache or MemorySelectionCache(self.turn_keys.resolve)
        self.tables = StaticTables(rulebook, self.settings)

    # =========================================================================
    # Public API
    # =========================================================================

    def build(self, location_override: Any = None) -> ContextSnapshot:
        """Build the full context for the current turn.

        Args:
            location_override: Location object (or id) to build for instead
                of the player's current location.

        Returns:
            The complete context; never raises.
        """
        turn_key = self.turn_keys.resolve()
        with scoped_context(turn_key=turn_key):
            try:
                return self._build(turn_key, location_override)
            except Exception:
                logger.exception("Context build failed, returning defaults", operation="build")
                return self._empty_snapshot()

    def build_slim(self, location_override: Any = None) -> SlimContextSnapshot:
        """Build the reduced context used for lower-cost invocations.

        Memories, dispositions, need bars, personality and the world outline
        are omitted; the transcript is a short unannotated window.
        """
        turn_key = self.turn_keys.resolve()
        with scoped_context(turn_key=turn_key):
            try:
                return self._build_slim(location_override)
            except Exception:
                logger.exception("Slim context build failed, returning defaults", operation="build_slim")
                return SlimContextSnapshot(
                    game_history=EMPTY_HISTORY_TEXT,
                    current_location=SlimLocation(
                        name=UNKNOWN_LOCATION_NAME,
                        description=UNKNOWN_LOCATION_DESCRIPTION,
                    ),
                    current_player=SlimPlayer(name=SLIM_PLAYER_NAME),
                    model=self.settings.ai.model,
                )

    # =========================================================================
    # Builds
    # =========================================================================

    def _build(self, turn_key: str, location_override: Any) -> ContextSnapshot:
        world = self._read_world()
        scene = self._resolve_scene(world, location_override)
        dispositions = self.tables.disposition_definitions()
        normalizer = EntityNormalizer(
            self.rulebook,
            skill_definitions=world.skills,
            disposition_definitions=dispositions,
            player_id=read_field(world.player, "id"),
        )

        npcs = self._npcs(world, scene, normalizer)
        party = self._party(world, normalizer)
        if not npcs and party:
            npcs = [member.model_copy() for member in party]

        max_memories = self.settings.max_memories_to_recall
        npcs = self._apply_memory_selection(npcs, "npc", turn_key, max_memories)
        party = self._apply_memory_selection(party, "party", turn_key, max_memories)

        windower = HistoryWindower(world.locations, self.sources.location_lookup)
        summaries = self.settings.summaries
        gear_slots = self.tables.gear_slot_definitions()

        snapshot = ContextSnapshot(
            setting=self._setting(world),
            game_history=windower.render(
                world.history,
                summaries.max_unsummarized_log_entries,
                summaries.max_summarized_log_entries,
            ),
            current_region=guarded("region_context", _unknown_region(), self._region_context, world, scene),
            current_location=guarded("location_context", _unknown_location(), self._location_context, scene),
            current_player=guarded(
                "player_context",
                PlayerSnapshot(name=UNKNOWN_PLAYER_NAME),
                normalizer.player_snapshot,
                world.player,
            ),
            npcs=npcs,
            party=party,
            items_in_scene=guarded("items_in_scene", [], self._items_in_scene, world, scene),
            disposition_types=self.tables.disposition_types(dispositions),
            disposition_range=dict(dispositions.range),
            need_bar_definitions=self.tables.need_bar_definitions(),
            gear_slots=gear_slot_names(gear_slots),
            equipment_slots=gear_slot_types(gear_slots),
            attributes=self.tables.attributes,
            attribute_definitions=self.tables.attribute_definitions,
            rarity_definitions=self.tables.rarity_definitions(),
            experience_point_values=self.tables.experience_point_values(),
            generated_thing_rarity=self.tables.generated_rarity(),
            world_outline=guarded("world_outline", {}, self._world_outline, world),
            max_memories_to_recall=max_memories,
        )
        logger.debug(
            "Context built",
            location=snapshot.current_location.name,
            npcs=len(snapshot.npcs),
            party=len(snapshot.party),
            items=len(snapshot.items_in_scene),
        )
        return snapshot

    def _build_slim(self, location_override: Any) -> SlimContextSnapshot:
        world = self._read_world()
        scene = self._resolve_scene(world, location_override, with_region=False)
        normalizer = EntityNormalizer(self.rulebook, skill_definitions=world.skills)
        setting = self._setting(world)

        location = guarded("location_context", _unknown_location(), self._location_context, scene)
        npcs = []
        for actor in self._actors_at(world, scene):
            npc = guarded("slim_npc", None, normalizer.slim_npc, actor)
            if npc is not None:
                npcs.append(npc)

        summaries = self.settings.summaries
        return SlimContextSnapshot(
            setting=SlimSetting(name=setting.name, description=setting.description),
            game_history=HistoryWindower().render_slim(
                world.history,
                summaries.max_unsummarized_log_entries,
                summaries.max_summarized_log_entries,
            ),
            current_location=SlimLocation(
                name=location.name,
                description=location.description,
                exits=[SlimExit(name=exit_.name) for exit_ in location.exits],
            ),
            current_player=guarded(
                "slim_player",
                SlimPlayer(name=SLIM_PLAYER_NAME),
                normalizer.slim_player,
                world.player,
            ),
            npcs=npcs,
            model=self.settings.ai.model,
        )

    def _empty_snapshot(self) -> ContextSnapshot:
        return ContextSnapshot(
            setting=SettingContext(description=describe_setting(None, self.settings.default_setting_description)),
            game_history=EMPTY_HISTORY_TEXT,
            current_region=_unknown_region(),
            current_location=_unknown_location(),
            current_player=PlayerSnapshot(name=UNKNOWN_PLAYER_NAME),
            max_memories_to_recall=self.settings.max_memories_to_recall,
        )

    # =========================================================================
    # World Access
    # =========================================================================

    def _read_world(self) -> WorldView:
        def mapping(operation: str, accessor: Any) -> Mapping[str, Any]:
            value = guarded(operation, None, accessor)
            return value if isinstance(value, Mapping) else {}

        history = guarded("chat_history", None, self.sources.chat_history)
        return WorldView(
            player=guarded("current_player", None, self.sources.current_player),
            history=_as_sequence(history),
            locations=mapping("locations", self.sources.locations),
            regions=mapping("regions", self.sources.regions),
            things=mapping("things", self.sources.things),
            actors=mapping("actors", self.sources.actors),
            skills=mapping("skills", self.sources.skills),
            setting=guarded("current_setting", None, self.sources.current_setting),
        )

    def _lookup_location(self, world: WorldView, location_id: Any) -> Any:
        location = _get_by_id(world.locations, location_id)
        if location is None and self.sources.location_lookup is not None:
            location = self.sources.location_lookup(location_id)
        if location is None:
            raise ContextLookupError(f"Location {location_id!r} not found", operation="resolve_location")
        return location

    def _resolve_location(self, world: WorldView, location_override: Any) -> Any:
        if location_override is not None and not isinstance(location_override, str):
            return location_override
        location_id = location_override or read_field(world.player, "current_location")
        if not location_id:
            return None
        return self._lookup_location(world, location_id)

    def _find_region(self, world: WorldView, location: Any) -> Any:
        location_id = read_field(location, "id")
        if location_id:
            for region in world.regions.values():
                location_ids = as_list(read_field(region, "location_ids"))
                if location_ids and location_id in location_ids:
                    return region
        region_id = read_field(read_field(location, "stub_metadata"), "region_id")
        if region_id:
            return _get_by_id(world.regions, region_id)
        return None

    def _resolve_scene(self, world: WorldView, location_override: Any, *, with_region: bool = True) -> Scene:
        scene = Scene()
        try:
            scene.location = self._resolve_location(world, location_override)
        except Exception as exc:
            logger.warning(
                "Failed to resolve current location",
                operation="resolve_location",
                error=str(exc),
            )
        if scene.location is None:
            return scene

        details = guarded("location_details", None, call_capability, scene.location, "get_details")
        scene.details = None if details is MISSING else details
        if with_region:
            scene.region = guarded("resolve_region", None, self._find_region, world, scene.location)
        return scene

    # =========================================================================
    # Sections
    # =========================================================================

    def _setting(self, world: WorldView) -> SettingContext:
        snapshot = guarded("active_setting", None, active_setting_snapshot, world.setting)
        description = describe_setting(snapshot, self.settings.default_setting_description)
        return guarded(
            "setting_context",
            SettingContext(description=description),
            build_setting_context,
            snapshot,
            description,
        )

    def _location_context(self, scene: Scene) -> LocationContext:
        exits: list[ExitSummary] = []
        raw_exits = read_field(scene.details, "exits")
        if isinstance(raw_exits, Mapping):
            for exit_info in raw_exits.values():
                if not exit_info:
                    continue
                vehicle_type = read_field(exit_info, "vehicle_type")
                exits.append(
                    ExitSummary(
                        name=_text(read_field(exit_info, "name")),
                        is_vehicle=bool(read_field(exit_info, "is_vehicle")),
                        vehicle_type=vehicle_type if isinstance(vehicle_type, str) else None,
                    )
                )

        return LocationContext(
            name=_first_text(read_field(scene.details, "name"), read_field(scene.location, "name"))
            or UNKNOWN_LOCATION_NAME,
            description=_first_text(
                read_field(scene.details, "description"),
                read_field(scene.location, "description"),
            )
            or UNKNOWN_LOCATION_DESCRIPTION,
            status_effects=normalize_status_effects(scene.location or scene.details),
            exits=exits,
        )

    def _region_context(self, world: WorldView, scene: Scene) -> RegionContext:
        region_status = as_mapping(scene.region) if scene.region is not None else None
        stub = read_field(scene.location, "stub_metadata")

        locations: list[RegionLocation] = []
        for location_id in as_list(read_field(region_status, "location_ids")) or []:
            if not location_id:
                continue
            record = _get_by_id(world.locations, location_id)
            details = call_capability(record, "get_details")
            details = None if details is MISSING else details
            locations.append(
                RegionLocation(
                    id=str(location_id),
                    name=_first_text(read_field(details, "name"), read_field(record, "name")) or str(location_id),
                    description=_first_text(
                        read_field(details, "description"),
                        read_field(record, "description"),
                        read_field(read_field(record, "stub_metadata"), "blueprint_description"),
                    )
                    or "",
                )
            )

        if not locations:
            for blueprint in as_list(read_field(region_status, "location_blueprints")) or []:
                name = _text(read_field(blueprint, "name"))
                if not name:
                    continue
                locations.append(
                    RegionLocation(
                        id=name,
                        name=name,
                        description=_text(read_field(blueprint, "description")) or "",
                    )
                )

        return RegionContext(
            name=_first_text(read_field(region_status, "name"), read_field(stub, "region_name"))
            or UNKNOWN_REGION_NAME,
            description=_first_text(
                read_field(region_status, "description"),
                read_field(stub, "region_description"),
            )
            or UNKNOWN_REGION_DESCRIPTION,
            status_effects=normalize_status_effects(scene.region or region_status),
            locations=locations,
        )

    def _world_outline(self, world: WorldView) -> dict[str, list[str]]:
        """Region name -> names of its locations, for every known region."""
        outline: dict[str, list[str]] = {}
        for region in world.regions.values():
            name = _text(read_field(region, "name"))
            if not name:
                continue
            members = as_list(read_field(region, "locations"))
            if members is None:
                members = [
                    _get_by_id(world.locations, location_id) or location_id
                    for location_id in as_list(read_field(region, "location_ids")) or []
                ]
            names: list[str] = []
            for member in members:
                member_name = member if isinstance(member, str) else location_display_name(member)
                if member_name:
                    names.append(member_name)
            outline[name] = names
        return outline

    def _actors_at(self, world: WorldView, scene: Scene) -> list[Any]:
        if scene.location is None:
            return []
        npc_ids = as_list(read_field(scene.location, "npc_ids"))
        if npc_ids is None:
            npc_ids = as_list(read_field(scene.details, "npc_ids")) or []
        actors = [_get_by_id(world.actors, npc_id) for npc_id in npc_ids]
        return [actor for actor in actors if actor is not None]

    def _npcs(self, world: WorldView, scene: Scene, normalizer: EntityNormalizer) -> list[ActorSnapshot]:
        npcs: list[ActorSnapshot] = []
        for actor in self._actors_at(world, scene):
            snapshot = guarded("npc_snapshot", None, normalizer.actor_snapshot, actor, "npc")
            if snapshot is not None:
                npcs.append(snapshot)
        return npcs

    def _party(self, world: WorldView, normalizer: EntityNormalizer) -> list[ActorSnapshot]:
        member_ids = guarded("party_members", MISSING, call_capability, world.player, "get_party_members")
        if member_ids is MISSING:
            return []
        party: list[ActorSnapshot] = []
        for member_id in _as_sequence(member_ids):
            member = _get_by_id(world.actors, member_id)
            if member is None:
                continue
            snapshot = guarded("party_snapshot", None, normalizer.actor_snapshot, member, "party")
            if snapshot is not None:
                party.append(snapshot)
        return party

    def _items_in_scene(self, world: WorldView, scene: Scene) -> list[ItemSnapshot]:
        """Unowned things lying at the current location."""
        location_id = scene.location_id
        if scene.location is None or not location_id:
            return []
        items: list[ItemSnapshot] = []
        for thing in world.things.values():
            metadata = read_field(thing, "metadata") or {}
            if read_field(metadata, "location_id") != location_id or read_field(metadata, "owner_id"):
                continue
            item = guarded("normalize_item", None, normalize_item, thing)
            if item is not None:
                items.append(item)
        return items

    def _apply_memory_selection(
        self,
        actors: list[ActorSnapshot],
        group: str,
        turn_key: str,
        max_memories: int,
    ) -> list[ActorSnapshot]:
        selected_actors: list[ActorSnapshot] = []
        for actor in actors:
            selection = guarded(
                "select_memories",
                [],
                self.memory_cache.select,
                actor_cache_id(actor, group),
                actor.important_memories,
                max_memories,
                turn_key=turn_key,
            )
            selected_actors.append(actor.model_copy(update={"selected_important_memories": selection}))
        return selected_actors


def _unknown_region() -> RegionContext:
    return RegionContext(name=UNKNOWN_REGION_NAME, description=UNKNOWN_REGION_DESCRIPTION)


def _unknown_location() -> LocationContext:
    return LocationContext(name=UNKNOWN_LOCATION_NAME, description=UNKNOWN_LOCATION_DESCRIPTION)


__all__ = [
    "ContextAssembler",
    "Scene",
    "WorldView",
]
