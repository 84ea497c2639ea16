"""Entity normalization.

Reconciles the many shapes actors, items and their status blocks arrive in
into the canonical snapshot models. Normalization never fails: unusable
entries are skipped, missing fields take documented defaults, and any
lookup that raises is logged and replaced by its default.

Actors are read through two layers. The *status* block (the result of an
actor's ``get_status()`` capability, when present) is consulted first and
the actor object itself second, mirroring how the game exposes a derived
view over its live entities.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from rpg_context.context.adapters import (
    MISSING,
    as_list,
    as_mapping,
    call_capability,
    coalesce,
    first_truthy,
    guarded,
    has_capability,
    iter_mapping_items,
    non_empty_str,
    read_field,
    to_number,
)
from rpg_context.context.memory_cache import sanitize_important_memories
from rpg_context.context.ports import Rulebook
from rpg_context.core.constants import (
    BORING_SKILL_NAMES,
    BORING_SKILL_PREFIXES,
    DEFAULT_PLAYER_CLASS,
    MIN_INTERESTING_SKILL_NAME_LENGTH,
    MIN_INTERESTING_SKILL_RANK,
    SCENERY_THING_TYPE,
    SLIM_PLAYER_NAME,
    UNKNOWN_ALLY_NAME,
    UNKNOWN_ITEM_NAME,
    UNKNOWN_NPC_NAME,
    UNKNOWN_PLAYER_NAME,
    UNKNOWN_VALUE,
)
from rpg_context.core.exceptions import NormalizationError
from rpg_context.core.logging import get_logger
from rpg_context.models.reference import DispositionDefinitions
from rpg_context.models.snapshots import (
    ActorSnapshot,
    DispositionEntry,
    GearSlotEntry,
    ItemSnapshot,
    Personality,
    PlayerSnapshot,
    SkillEntry,
    SlimItem,
    SlimNpc,
    SlimPlayer,
    SlimSkill,
    StatusEffect,
)


logger = get_logger(__name__)


# =============================================================================
# Small Coercions
# =============================================================================


def _first_text(*values: Any) -> str | None:
    """First value that is a non-empty string (untrimmed)."""
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _scalar(value: Any) -> int | float | str | None:
    if isinstance(value, (int, float, str)):
        return value
    return None


def _class_name(source: Any) -> Any:
    return coalesce(read_field(source, "class_name"), read_field(source, "class"))


def _is_structured(value: Any) -> bool:
    """Whether ``value`` can hold named fields (mapping, model or plain object)."""
    if value is None or isinstance(value, (str, bytes, int, float, bool, list, tuple)):
        return False
    return isinstance(value, (Mapping, BaseModel)) or hasattr(value, "__dict__")


# =============================================================================
# Status Effects
# =============================================================================


def normalize_status_effect(entry: Any) -> StatusEffect | None:
    """Normalize one status effect entry.

    Strings become a one-turn effect. Structured entries take their
    description from ``description``, ``text`` or ``name`` and their
    duration from ``duration``: numbers (and numeric strings) are floored,
    a blank string counts as zero, an explicit None means indefinite and
    anything else means one turn.
    Durations are clamped to zero.

    Example:
        >>> normalize_status_effect({"name": "Stunned", "duration": -3})
        StatusEffect(description='Stunned', duration=0)
    """
    if not entry:
        return None
    if isinstance(entry, str):
        description = entry.strip()
        return StatusEffect(description=description, duration=1) if description else None
    if not _is_structured(entry):
        return None

    description = None
    for field_name in ("description", "text", "name"):
        description = non_empty_str(read_field(entry, field_name))
        if description:
            break
    if not description:
        return None

    raw_duration = read_field(entry, "duration", MISSING)
    number = to_number(raw_duration)
    duration: int | None
    if number is not None:
        duration = max(0, math.floor(number))
    elif raw_duration is None:
        duration = None
    elif isinstance(raw_duration, str) and not raw_duration.strip():
        duration = 0
    else:
        duration = 1
    return StatusEffect(description=description, duration=duration)


def normalize_status_effects(value: Any) -> list[StatusEffect]:
    """Normalize the status effects of an actor, item, place or raw list."""
    if not value:
        return []
    if has_capability(value, "get_status_effects"):
        source = call_capability(value, "get_status_effects")
    elif isinstance(value, (list, tuple)):
        source = value
    else:
        source = read_field(value, "status_effects")

    effects: list[StatusEffect] = []
    for entry in as_list(source) or []:
        effect = normalize_status_effect(entry)
        if effect is not None:
            effects.append(effect)
    return effects


# =============================================================================
# Items
# =============================================================================


def _thing_type(item: Any) -> str | None:
    raw = coalesce(
        read_field(item, "thing_type"),
        read_field(item, "item_or_scenery"),
        read_field(item, "type"),
        read_field(item, "item_type_detail"),
    )
    text = non_empty_str(raw)
    return text.lower() if text else None


def normalize_item(item: Any, equipped_slot: str | None = None) -> ItemSnapshot | None:
    """Normalize an inventory item or a piece of scenery.

    Args:
        item: Item object or mapping.
        equipped_slot: Slot the item occupies; read from the item when omitted.

    Returns:
        The item snapshot, or None for an empty item.
    """
    if not item:
        return None

    metadata = read_field(item, "metadata")
    thing_type = _thing_type(item)

    explicit_scenery = read_field(item, "is_scenery")
    metadata_scenery = read_field(metadata, "is_scenery")
    if isinstance(explicit_scenery, bool):
        is_scenery = explicit_scenery
    elif isinstance(metadata_scenery, bool):
        is_scenery = metadata_scenery
    elif thing_type:
        is_scenery = thing_type == SCENERY_THING_TYPE
    else:
        is_scenery = False

    if equipped_slot is None:
        equipped_slot = read_field(item, "equipped_slot")

    return ItemSnapshot(
        name=_first_text(read_field(item, "name"), read_field(item, "title")) or UNKNOWN_ITEM_NAME,
        description=_first_text(read_field(item, "description"), read_field(item, "summary")) or "",
        status_effects=normalize_status_effects(item),
        equipped_slot=equipped_slot if isinstance(equipped_slot, str) and equipped_slot else None,
        is_scenery=is_scenery,
        thing_type=thing_type or (SCENERY_THING_TYPE if is_scenery else None),
        rarity=read_field(item, "rarity") or None,
        attribute_bonuses=as_list(read_field(item, "attribute_bonuses")) or [],
        cause_status_effect=read_field(item, "cause_status_effect") or None,
        value=read_field(metadata, "value"),
        weight=read_field(metadata, "weight"),
        properties=read_field(metadata, "properties"),
    )


def normalize_inventory(status: Any) -> list[ItemSnapshot]:
    """Normalize every item of a status block's inventory, skipping failures."""
    items: list[ItemSnapshot] = []
    for entry in as_list(read_field(status, "inventory")) or []:
        item = guarded("normalize_item", None, normalize_item, entry)
        if item is not None:
            items.append(item)
    return items


# =============================================================================
# Skills
# =============================================================================


def is_interesting_skill(name: Any, rank: Any) -> bool:
    """Whether a skill is worth mentioning.

    Generic skills ("Basic ...", "Common ...", "General ...", common or
    general knowledge) are dropped. Everything else is kept when its rank
    is at least 2 or its name is longer than four characters.

    Example:
        >>> is_interesting_skill("Basic Swordplay", 5)
        False
        >>> is_interesting_skill("Lockpicking", 1)
        True
        >>> is_interesting_skill("Aim", 1)
        False
    """
    if not isinstance(name, str):
        return False
    normalized = name.strip().lower()
    if not normalized:
        return False
    if normalized.startswith(BORING_SKILL_PREFIXES) or normalized in BORING_SKILL_NAMES:
        return False
    rank_value = to_number(rank)
    if rank_value is None:
        rank_value = 0
    return rank_value >= MIN_INTERESTING_SKILL_RANK or len(normalized) > MIN_INTERESTING_SKILL_NAME_LENGTH


def _skill_definition(name: str, definitions: Mapping[str, Any]) -> Any:
    definition = definitions.get(name)
    if definition is not None:
        return definition
    wanted = name.strip().lower()
    for candidate, value in definitions.items():
        if isinstance(candidate, str) and candidate.strip().lower() == wanted:
            return value
    return None


def normalize_skills(source: Any, definitions: Mapping[str, Any] | None = None) -> list[SkillEntry]:
    """Filter a ``name -> rank`` mapping down to interesting skills.

    Descriptions come from the skill definitions (exact name first, then a
    case-insensitive match). The result is sorted case-insensitively.
    """
    definitions = definitions or {}
    entries: list[SkillEntry] = []
    for name, rank in iter_mapping_items(source):
        if not name or not isinstance(name, str):
            continue
        rank_value = to_number(rank)
        if not is_interesting_skill(name, rank_value):
            continue
        definition = _skill_definition(name, definitions)
        description = _first_text(
            read_field(definition, "description"),
            read_field(definition, "details"),
        )
        entries.append(SkillEntry(name=name, value=rank_value, description=description or ""))
    return sorted(entries, key=lambda entry: entry.name.casefold())


def _skill_info_entry(entry: Any) -> SkillEntry:
    if isinstance(entry, SkillEntry):
        return entry
    name = read_field(entry, "name")
    if not isinstance(name, str) or not name:
        raise NormalizationError("Skill entry has no name", field_name="skill_info")
    description = read_field(entry, "description")
    return SkillEntry(
        name=name,
        value=to_number(read_field(entry, "value")),
        description=description if isinstance(description, str) else "",
    )


def collect_actor_skills(
    status: Any,
    actor: Any,
    definitions: Mapping[str, Any] | None = None,
) -> list[SkillEntry]:
    """Collect an actor's skills from the first source that has any.

    Sources, in order: a precomputed ``skill_info`` list on the status
    block (used as-is), a ``skills`` mapping on the status block, then the
    actor's ``get_skills()`` capability.
    """
    skill_info = as_list(read_field(status, "skill_info"))
    if skill_info is not None:
        entries: list[SkillEntry] = []
        for entry in skill_info:
            try:
                entries.append(_skill_info_entry(entry))
            except (NormalizationError, ValidationError) as exc:
                logger.warning("Skipping malformed skill entry", operation="collect_actor_skills", error=str(exc))
        return entries

    status_skills = read_field(status, "skills")
    if status_skills:
        return normalize_skills(status_skills, definitions)

    source = call_capability(actor, "get_skills")
    if source:
        return normalize_skills(source, definitions)
    return []


# =============================================================================
# Personality
# =============================================================================


def _flatten_values(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        trimmed = value.strip()
        return [trimmed] if trimmed else []
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (int, float)):
        return [str(value)]
    if isinstance(value, (list, tuple)):
        return [part for entry in value for part in _flatten_values(entry)]
    if isinstance(value, Mapping):
        return [part for entry in value.values() for part in _flatten_values(entry)]
    return []


def flatten_personality_value(value: Any) -> str | None:
    """Flatten strings, numbers, lists and mappings into one comma-joined string."""
    parts = _flatten_values(value)
    return ", ".join(parts) if parts else None


def collect_personality_goals(value: Any) -> list[str]:
    """Collect goal strings from nested lists and mappings, dropping duplicates."""
    goals: list[str] = []

    def visit(entry: Any) -> None:
        if isinstance(entry, str):
            trimmed = entry.strip()
            if trimmed and trimmed not in goals:
                goals.append(trimmed)
        elif isinstance(entry, (list, tuple)):
            for item in entry:
                visit(item)
        elif isinstance(entry, Mapping):
            for item in entry.values():
                visit(item)

    visit(value)
    return goals


def extract_personality(primary: Any = None, fallback: Any = None) -> Personality:
    """Merge personality fields from a status block and its actor.

    Args:
        primary: Status block, consulted first.
        fallback: Actor object, consulted for whatever the status lacks.

    Returns:
        The merged personality.
    """
    primary = primary if _is_structured(primary) else None
    fallback = fallback if _is_structured(fallback) else None
    source = read_field(primary, "personality")
    source = source if _is_structured(source) else None
    fallback_source = read_field(fallback, "personality")
    fallback_source = fallback_source if _is_structured(fallback_source) else None

    def pick(field_name: str) -> str | None:
        return flatten_personality_value(
            coalesce(
                read_field(source, field_name),
                read_field(primary, f"personality_{field_name}"),
                read_field(fallback, f"personality_{field_name}"),
            )
        )

    goals = collect_personality_goals(
        coalesce(
            read_field(source, "goals"),
            read_field(primary, "goals"),
            read_field(primary, "personality_goals"),
            read_field(fallback_source, "goals"),
            read_field(fallback, "goals"),
        )
    )
    return Personality(type=pick("type"), traits=pick("traits"), notes=pick("notes"), goals=goals)


# =============================================================================
# Dispositions and Need Bars
# =============================================================================


def _disposition_value(actor: Any, player_id: str, type_key: str) -> int | float:
    if has_capability(actor, "get_disposition_towards_current_player"):
        raw = call_capability(actor, "get_disposition_towards_current_player", type_key)
    elif has_capability(actor, "get_disposition"):
        raw = call_capability(actor, "get_disposition", player_id, type_key)
    else:
        raw = read_field(read_field(read_field(actor, "dispositions"), player_id), type_key)
    value = to_number(raw)
    return 0 if value is None else value


def compute_dispositions(
    actor: Any,
    player_id: Any,
    definitions: DispositionDefinitions,
    rulebook: Rulebook,
) -> list[DispositionEntry]:
    """Compute an actor's dispositions toward the current player.

    One entry per configured disposition type. A type whose value or
    intensity lookup fails still yields an entry with defaults.
    """
    if not actor or not isinstance(player_id, str) or not player_id or not definitions.types:
        return []

    dispositions: list[DispositionEntry] = []
    for definition in definitions.types.values():
        if not definition.key:
            continue
        value = guarded("resolve_disposition", 0, _disposition_value, actor, player_id, definition.key)
        intensity = guarded(
            "resolve_disposition_intensity",
            None,
            rulebook.resolve_disposition_intensity,
            definition.key,
            value,
        )
        dispositions.append(
            DispositionEntry(
                type=definition.display_name,
                value=value,
                intensity_name=intensity if isinstance(intensity, str) else None,
            )
        )
    return dispositions


def collect_need_bars(actor: Any, status: Any, *, include_player_only: bool) -> list[dict[str, Any]]:
    """Need bars from the actor's prompt-context capability, else copies from its status."""
    bars = call_capability(actor, "get_need_bar_prompt_context", include_player_only=include_player_only)
    if bars is MISSING:
        bars = read_field(status, "need_bars")
    collected: list[dict[str, Any]] = []
    for bar in as_list(bars) or []:
        mapped = as_mapping(bar)
        if mapped is not None:
            collected.append(mapped)
    return collected


def gear_snapshot(status: Any) -> list[GearSlotEntry]:
    gear = read_field(status, "gear")
    entries: list[GearSlotEntry] = []
    for slot, slot_data in iter_mapping_items(gear):
        item_id = read_field(slot_data, "item_id")
        entries.append(GearSlotEntry(slot=str(slot), item_id=str(item_id) if item_id else None))
    return entries


# =============================================================================
# Actors
# =============================================================================


class EntityNormalizer:
    """Build actor snapshots for one context build.

    Args:
        rulebook: Supplies disposition intensities.
        skill_definitions: Skill name -> definition, for descriptions.
        disposition_definitions: Configured disposition types.
        player_id: Id of the current player; dispositions are computed toward it.
    """

    def __init__(
        self,
        rulebook: Rulebook,
        *,
        skill_definitions: Mapping[str, Any] | None = None,
        disposition_definitions: DispositionDefinitions | None = None,
        player_id: Any = None,
    ) -> None:
        self.rulebook = rulebook
        self.skill_definitions = skill_definitions or {}
        self.disposition_definitions = disposition_definitions or DispositionDefinitions()
        self.player_id = player_id

    def status_of(self, actor: Any) -> Any:
        """The actor's status block, or None."""
        status = guarded("get_status", None, call_capability, actor, "get_status")
        return None if status is MISSING else status

    def skills_of(self, status: Any, actor: Any) -> list[SkillEntry]:
        return guarded("collect_actor_skills", [], collect_actor_skills, status, actor, self.skill_definitions)

    def actor_snapshot(self, actor: Any, group: str) -> ActorSnapshot:
        """Snapshot a non-player character (``group="npc"``) or party member (``group="party"``)."""
        status = self.status_of(actor)
        if group == "party":
            default_name = UNKNOWN_ALLY_NAME
            include_player_only = not read_field(actor, "is_npc")
        else:
            default_name = UNKNOWN_NPC_NAME
            include_player_only = False

        memories = sanitize_important_memories(
            first_truthy(
                read_field(status, "important_memories"),
                read_field(actor, "important_memories"),
                read_field(actor, "memories"),
            )
        )
        actor_id = read_field(actor, "id")

        return ActorSnapshot(
            id=str(actor_id) if actor_id else None,
            name=_first_text(read_field(status, "name"), read_field(actor, "name")) or default_name,
            description=_first_text(read_field(status, "description"), read_field(actor, "description")) or "",
            class_name=_first_text(_class_name(status), _class_name(actor)),
            race=_first_text(read_field(status, "race"), read_field(actor, "race")),
            level=_scalar(first_truthy(read_field(status, "level"), read_field(actor, "level"))),
            health=_scalar(coalesce(read_field(status, "health"), read_field(actor, "health"))),
            max_health=_scalar(coalesce(read_field(status, "max_health"), read_field(actor, "max_health"))),
            status_effects=guarded("normalize_status_effects", [], normalize_status_effects, actor or status),
            inventory=normalize_inventory(status),
            skills=self.skills_of(status, actor),
            personality=guarded("extract_personality", Personality(), extract_personality, status, actor),
            dispositions_toward_player=compute_dispositions(
                actor, self.player_id, self.disposition_definitions, self.rulebook
            ),
            need_bars=guarded(
                "collect_need_bars", [], collect_need_bars, actor, status, include_player_only=include_player_only
            ),
            important_memories=memories,
        )

    def player_snapshot(self, player: Any) -> PlayerSnapshot:
        """Snapshot the current player, with placeholders for missing vitals."""
        status = self.status_of(player)
        return PlayerSnapshot(
            name=_first_text(read_field(status, "name"), read_field(player, "name")) or UNKNOWN_PLAYER_NAME,
            description=_first_text(read_field(status, "description"), read_field(player, "description")) or "",
            health=_scalar(coalesce(read_field(status, "health"), UNKNOWN_VALUE)),
            max_health=_scalar(coalesce(read_field(status, "max_health"), UNKNOWN_VALUE)),
            level=_scalar(coalesce(read_field(status, "level"), read_field(player, "level"), UNKNOWN_VALUE)),
            class_name=_first_text(_class_name(status), _class_name(player)) or DEFAULT_PLAYER_CLASS,
            race=_first_text(read_field(status, "race"), read_field(player, "race")) or UNKNOWN_VALUE,
            status_effects=guarded("normalize_status_effects", [], normalize_status_effects, player or status),
            inventory=normalize_inventory(status),
            skills=self.skills_of(status, player),
            gear=guarded("gear_snapshot", [], gear_snapshot, status),
            personality=guarded("extract_personality", Personality(), extract_personality, status, player),
            currency=_scalar(coalesce(read_field(status, "currency"), read_field(player, "currency"), 0)),
            need_bars=guarded("collect_need_bars", [], collect_need_bars, player, status, include_player_only=True),
        )

    # -------------------------------------------------------------------------
    # Slim views
    # -------------------------------------------------------------------------

    def slim_player(self, player: Any) -> SlimPlayer:
        """Minimal player summary; skills are listed unfiltered."""
        status = self.status_of(player)

        inventory: list[SlimItem] = []
        for item in as_list(read_field(status, "inventory")) or []:
            if not item:
                continue
            inventory.append(
                SlimItem(
                    name=_first_text(read_field(item, "name")) or UNKNOWN_ITEM_NAME,
                    description=_first_text(read_field(item, "description")) or "",
                )
            )

        skill_source = read_field(status, "skills")
        if not skill_source:
            skill_source = guarded("get_skills", None, call_capability, player, "get_skills")
        skills = [
            SlimSkill(name=name, value=to_number(rank))
            for name, rank in iter_mapping_items(skill_source)
            if isinstance(name, str) and name
        ]

        return SlimPlayer(
            name=_first_text(read_field(status, "name"), read_field(player, "name")) or SLIM_PLAYER_NAME,
            description=_first_text(read_field(status, "description"), read_field(player, "description")) or "",
            health=_scalar(coalesce(read_field(status, "health"), UNKNOWN_VALUE)),
            max_health=_scalar(coalesce(read_field(status, "max_health"), UNKNOWN_VALUE)),
            level=_scalar(coalesce(read_field(status, "level"), read_field(player, "level"), UNKNOWN_VALUE)),
            class_name=_first_text(_class_name(status), _class_name(player)) or DEFAULT_PLAYER_CLASS,
            race=_first_text(read_field(status, "race"), read_field(player, "race")) or UNKNOWN_VALUE,
            inventory=inventory,
            skills=skills,
        )

    def slim_npc(self, actor: Any) -> SlimNpc:
        status = self.status_of(actor)
        return SlimNpc(
            name=_first_text(read_field(status, "name"), read_field(actor, "name")),
            description=_first_text(read_field(status, "description"), read_field(actor, "description")) or "",
        )


__all__ = [
    "EntityNormalizer",
    "collect_actor_skills",
    "collect_need_bars",
    "collect_personality_goals",
    "compute_dispositions",
    "extract_personality",
    "flatten_personality_value",
    "gear_snapshot",
    "is_interesting_skill",
    "normalize_inventory",
    "normalize_item",
    "normalize_skills",
    "normalize_status_effect",
    "normalize_status_effects",
]
