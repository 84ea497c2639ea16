"""Context assembly for the text-generation service.

Submodules:
    ports: WorldSources accessors, Rulebook protocol and capability protocols
    adapters: Uniform field access over objects and mappings
    turn_key: Turn key resolution for cache scoping
    memory_cache: Turn-scoped important-memory selection
    normalize: Actor, item, skill and status-effect normalization
    history: Transcript windowing
    setting: Game setting description
    tables: Static reference tables
    assembler: Full and slim context builds
"""

from __future__ import annotations

# =============================================================================
# Dependency Boundary
# =============================================================================
from rpg_context.context.ports import (
    AttributeTemplate,
    Rulebook,
    StaticRulebook,
    WorldSources,
)

# =============================================================================
# Turn Scoping
# =============================================================================
from rpg_context.context.memory_cache import (
    MemoryCacheEntry,
    MemorySelectionCache,
    sanitize_important_memories,
)
from rpg_context.context.turn_key import TurnKeyResolver, derive_turn_key

# =============================================================================
# Normalization and Rendering
# =============================================================================
from rpg_context.context.history import HistoryWindower
from rpg_context.context.normalize import (
    EntityNormalizer,
    is_interesting_skill,
    normalize_item,
    normalize_status_effects,
)
from rpg_context.context.setting import build_setting_context, describe_setting
from rpg_context.context.tables import StaticTables

# =============================================================================
# Assembly
# =============================================================================
from rpg_context.context.assembler import ContextAssembler


__all__ = [
    # Dependency boundary
    "AttributeTemplate",
    "Rulebook",
    "StaticRulebook",
    "WorldSources",
    # Turn scoping
    "MemoryCacheEntry",
    "MemorySelectionCache",
    "TurnKeyResolver",
    "derive_turn_key",
    "sanitize_important_memories",
    # Normalization and rendering
    "EntityNormalizer",
    "HistoryWindower",
    "StaticTables",
    "build_setting_context",
    "describe_setting",
    "is_interesting_skill",
    "normalize_item",
    "normalize_status_effects",
    # Assembly
    "ContextAssembler",
]
