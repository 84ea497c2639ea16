"""rpg_context - per-turn prompt context for AI-narrated role-playing games.

Assembles a bounded, deterministic snapshot of the mutable game world
(player, location, region, characters, party, items, recent history) for a
text-generation service, once per game turn.

ARCHITECTURE:
- The host game owns TRUTH (world state, rules) and exposes it through
  ``WorldSources`` accessors and a ``Rulebook``
- This package only READS: snapshots are frozen projections rebuilt every turn
- Builds NEVER fail; every broken lookup degrades to a documented default

Example:
    >>> from rpg_context import ContextAssembler, StaticRulebook, WorldSources
    >>>
    >>> sources = WorldSources(
    ...     current_player=lambda: game.player,
    ...     chat_history=lambda: game.log,
    ...     locations=lambda: game.locations,
    ...     actors=lambda: game.actors,
    ... )
    >>> assembler = ContextAssembler(sources, StaticRulebook())
    >>> context = assembler.build()
    >>> print(context.game_history)

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 snapshot, history and rule-definition models.
    context: Adapters, normalizer, memory cache, history windower, assembler.
    utils: Auxiliary containers (SanitizedStringSet).
"""

from __future__ import annotations

# Core
from rpg_context.core.config import Settings, get_settings
from rpg_context.core.exceptions import RpgContextError

# Context assembly
from rpg_context.context import (
    ContextAssembler,
    MemorySelectionCache,
    Rulebook,
    StaticRulebook,
    TurnKeyResolver,
    WorldSources,
)

# Models
from rpg_context.models import ContextSnapshot, HistoryEntry, SlimContextSnapshot

# Utilities
from rpg_context.utils import SanitizedStringSet


__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "RpgContextError",
    "Settings",
    "get_settings",
    # Context assembly
    "ContextAssembler",
    "MemorySelectionCache",
    "Rulebook",
    "StaticRulebook",
    "TurnKeyResolver",
    "WorldSources",
    # Models
    "ContextSnapshot",
    "HistoryEntry",
    "SlimContextSnapshot",
    # Utilities
    "SanitizedStringSet",
]
