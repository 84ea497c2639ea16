"""Application-wide constants for the RPG prompt-context builder.

Default strings substituted into snapshots when the world state has no
value, plus the tuning constants of the memory and skill filters.
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Memory Recall
# =============================================================================

DEFAULT_MAX_MEMORIES_TO_RECALL = 10
"""Memories surfaced per actor when configuration is absent or invalid."""

MEMORY_SIGNATURE_SEPARATOR = "::"
MEMORY_JOIN_SEPARATOR = "||"

# =============================================================================
# Turn Keys
# =============================================================================

NO_PLAYER_ID = "no-player"
"""Player component of the turn key when no current player exists."""

# =============================================================================
# Transcript
# =============================================================================

EMPTY_HISTORY_TEXT = "No significant prior events."
DEFAULT_HISTORY_ROLE = "system"

SLIM_DEFAULT_MAX_UNSUMMARIZED = 10
SLIM_DEFAULT_MAX_SUMMARIZED = 5

PLAYER_ACTION_ENTRY_TYPE = "player-action"
RANDOM_EVENT_ENTRY_TYPE = "random-event"

# =============================================================================
# Skills
# =============================================================================

BORING_SKILL_PREFIXES = ("basic ", "common ", "general ")
BORING_SKILL_NAMES = frozenset({"common knowledge", "general knowledge"})
MIN_INTERESTING_SKILL_RANK = 2
MIN_INTERESTING_SKILL_NAME_LENGTH = 4
"""Skill names longer than this are kept regardless of rank."""

# =============================================================================
# Placeholder Text
# =============================================================================

DEFAULT_SETTING_DESCRIPTION = "A rich fantasy world filled with adventure."
UNKNOWN_LOCATION_NAME = "Unknown Location"
UNKNOWN_LOCATION_DESCRIPTION = "No description available."
UNKNOWN_REGION_NAME = "Unknown Region"
UNKNOWN_REGION_DESCRIPTION = "No region description available."
UNKNOWN_ITEM_NAME = "Unknown Item"
UNKNOWN_PLAYER_NAME = "Unknown Adventurer"
SLIM_PLAYER_NAME = "Adventurer"
DEFAULT_PLAYER_CLASS = "Adventurer"
UNKNOWN_VALUE = "Unknown"
UNKNOWN_NPC_NAME = "Unknown NPC"
UNKNOWN_ALLY_NAME = "Unknown Ally"
SCENERY_THING_TYPE = "scenery"

# =============================================================================
# Static Resources
# =============================================================================

DEFAULT_EXPERIENCE_POINT_VALUES_PATH = (
    Path(__file__).resolve().parent.parent / "data" / "experience_point_values.yaml"
)
