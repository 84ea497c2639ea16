"""Turn-scoped selection of important memories.

Each actor may carry an unbounded list of important memories, but only a
bounded subset is surfaced to the generation service per turn. Selections
are cached per actor under the current turn key so that repeated builds
within one turn return identical selections, and the whole cache is
dropped as soon as the turn key changes.

Example:
    >>> cache = MemorySelectionCache(lambda: "player-1:turn-7")
    >>> picked = cache.select("npc-1", ["met the hero", "lost a ring"], max_memories=1)
    >>> [entry.display_index for entry in picked]
    [1]
    >>> cache.entry("npc-1").from_fallback
    True
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from rpg_context.context.adapters import read_field
from rpg_context.core.config import coerce_positive_int
from rpg_context.core.constants import (
    DEFAULT_MAX_MEMORIES_TO_RECALL,
    MEMORY_JOIN_SEPARATOR,
    MEMORY_SIGNATURE_SEPARATOR,
)
from rpg_context.core.logging import get_logger
from rpg_context.models.snapshots import MemorySelectionEntry


logger = get_logger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def sanitize_important_memories(memories: Any) -> list[str]:
    """Keep only non-empty strings, trimmed, in original order."""
    if not isinstance(memories, (list, tuple)):
        return []
    cleaned: list[str] = []
    for entry in memories:
        if isinstance(entry, str) and entry.strip():
            cleaned.append(entry.strip())
    return cleaned


def build_selection(indices: Iterable[Any], memories: Sequence[str]) -> list[MemorySelectionEntry]:
    """Turn candidate indices into selection entries.

    Indices that are not integers, out of range or repeated are dropped;
    the remaining ones keep their given order.
    """
    seen: set[int] = set()
    selection: list[MemorySelectionEntry] = []
    for index in indices:
        if isinstance(index, bool) or not isinstance(index, int):
            continue
        if index < 0 or index >= len(memories) or index in seen:
            continue
        seen.add(index)
        selection.append(MemorySelectionEntry.at(index, memories[index]))
    return selection


def memory_signature(actor_id: str, memories: Sequence[str]) -> str:
    return f"{actor_id}{MEMORY_SIGNATURE_SEPARATOR}{MEMORY_JOIN_SEPARATOR.join(memories)}"


def actor_cache_id(actor: Any, group: str) -> str:
    """Cache identity of an actor: its id, else ``"<group>:<name>"``."""
    actor_id = read_field(actor, "id")
    if actor_id:
        return str(actor_id)
    name = read_field(actor, "name") or ""
    return f"{group}:{name}".strip()


def _copy_selection(selection: Iterable[MemorySelectionEntry]) -> list[MemorySelectionEntry]:
    return [entry.model_copy() for entry in selection]


# =============================================================================
# Cache
# =============================================================================


@dataclass(frozen=True)
class MemoryCacheEntry:
    """Cached selection for one actor.

    Attributes:
        signature: Actor id plus the joined memory list the selection was made from.
        selected: The selection.
        from_fallback: True when the list exceeded the recall cap and was truncated.
    """

    signature: str
    selected: tuple[MemorySelectionEntry, ...]
    from_fallback: bool


class MemorySelectionCache:
    """Per-turn cache of memory selections keyed by actor id.

    Args:
        turn_key_source: Zero-argument callable returning the current turn key.
    """

    def __init__(self, turn_key_source: Callable[[], str]) -> None:
        self._turn_key_source = turn_key_source
        self._turn_key: str | None = None
        self._entries: dict[str, MemoryCacheEntry] = {}
        self.computations = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def turn_key(self) -> str | None:
        """The turn key the current entries belong to."""
        return self._turn_key

    def entry(self, actor_id: str) -> MemoryCacheEntry | None:
        return self._entries.get(actor_id)

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, turn_key: str) -> bool:
        """Drop every entry if ``turn_key`` differs from the stored one.

        Returns:
            True when the cache was reset.
        """
        if turn_key == self._turn_key:
            return False
        if self._entries:
            logger.debug(
                "Memory selection cache invalidated",
                previous_turn_key=self._turn_key,
                turn_key=turn_key,
                dropped=len(self._entries),
            )
        self._turn_key = turn_key
        self._entries = {}
        return True

    def select(
        self,
        actor_id: str,
        memories: Sequence[str],
        max_memories: Any = DEFAULT_MAX_MEMORIES_TO_RECALL,
        *,
        turn_key: str | None = None,
    ) -> list[MemorySelectionEntry]:
        """Select the memories to surface for an actor this turn.

        Args:
            actor_id: Cache identity of the actor.
            memories: Sanitized important memories, in original order.
            max_memories: Recall cap; invalid values fall back to the default.
            turn_key: Current turn key; resolved from the source when omitted.

        Returns:
            A fresh copy of the selection.
        """
        self.invalidate(turn_key if turn_key is not None else self._turn_key_source())

        if not memories:
            return []

        cap = coerce_positive_int(max_memories, DEFAULT_MAX_MEMORIES_TO_RECALL)
        signature = memory_signature(actor_id, memories)

        cached = self._entries.get(actor_id)
        if cached is not None and cached.signature == signature:
            return _copy_selection(cached.selected)

        self.computations += 1
        if len(memories) <= cap:
            selected = build_selection(range(len(memories)), memories)
            from_fallback = False
        else:
            selected = build_selection(range(cap), memories)
            from_fallback = True

        self._entries[actor_id] = MemoryCacheEntry(
            signature=signature,
            selected=tuple(selected),
            from_fallback=from_fallback,
        )
        return _copy_selection(selected)


__all__ = [
    "MemoryCacheEntry",
    "MemorySelectionCache",
    "actor_cache_id",
    "build_selection",
    "memory_signature",
    "sanitize_important_memories",
]
