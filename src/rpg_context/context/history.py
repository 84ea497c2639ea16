"""History windowing.

Turns the unbounded game log into one bounded transcript. The newest
entries are rendered verbatim (the *tail*); the entries just before them
are rendered from their summaries only (the *head*). Each part has its
own budget, and a zero budget disables that part.

Transcript lines may carry two annotations:

- `` [location: <name>]`` on player actions, world events and NPC turns
  whose location can be resolved,
- `` [Seen by A, B]`` on non-travel entries that list witnesses.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from rpg_context.context.adapters import call_capability, guarded, read_field
from rpg_context.core.config import coerce_positive_int
from rpg_context.core.constants import (
    DEFAULT_HISTORY_ROLE,
    EMPTY_HISTORY_TEXT,
    PLAYER_ACTION_ENTRY_TYPE,
    RANDOM_EVENT_ENTRY_TYPE,
    SLIM_DEFAULT_MAX_SUMMARIZED,
    SLIM_DEFAULT_MAX_UNSUMMARIZED,
)
from rpg_context.models.history import HistoryEntry, coerce_history


def location_display_name(record: Any) -> str:
    """Name of a location record, preferring its ``get_details()`` view."""
    if record is None:
        return ""
    details = call_capability(record, "get_details")
    name = read_field(details, "name") or read_field(record, "name")
    return name if isinstance(name, str) else ""


def _role(entry: HistoryEntry) -> str:
    if entry.role and entry.role.strip():
        return entry.role.strip()
    return DEFAULT_HISTORY_ROLE


class HistoryWindower:
    """Render transcripts from the game log.

    Args:
        locations: Location id -> location record.
        location_lookup: Fallback lookup for ids missing from ``locations``.

    Example:
        >>> windower = HistoryWindower()
        >>> windower.render([{"role": "user", "content": "Hello"}], max_unsummarized=5, max_summarized=0)
        '[user] Hello'
    """

    def __init__(
        self,
        locations: Mapping[str, Any] | None = None,
        location_lookup: Callable[[str], Any] | None = None,
    ) -> None:
        self.locations = locations or {}
        self.location_lookup = location_lookup

    # -------------------------------------------------------------------------
    # Annotations
    # -------------------------------------------------------------------------

    def resolve_location_name(self, location_id: str) -> str:
        record = self.locations.get(location_id)
        if record is None and self.location_lookup is not None:
            record = guarded("history.location_lookup", None, self.location_lookup, location_id)
        return guarded("history.location_name", "", location_display_name, record)

    def location_suffix(self, entry: HistoryEntry) -> str:
        """`` [location: <name>]`` for player actions, world events and NPC turns."""
        is_player_action = entry.entry_type == PLAYER_ACTION_ENTRY_TYPE
        is_world_event = entry.entry_type == RANDOM_EVENT_ENTRY_TYPE or entry.random_event
        if not (is_player_action or is_world_event or entry.is_npc_turn):
            return ""
        location_id = entry.resolved_location_id
        if not location_id:
            return ""
        name = self.resolve_location_name(location_id)
        return f" [location: {name}]" if name else ""

    @staticmethod
    def witness_suffix(entry: HistoryEntry) -> str:
        if entry.travel:
            return ""
        names = entry.witness_names
        if not names:
            return ""
        return f" [Seen by {', '.join(names)}]"

    def _annotations(self, entry: HistoryEntry) -> str:
        return f"{self.location_suffix(entry)}{self.witness_suffix(entry)}"

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def window(
        self,
        entries: Iterable[Any],
        max_unsummarized: Any,
        max_summarized: Any,
    ) -> tuple[list[HistoryEntry], list[HistoryEntry]]:
        """Split the qualifying entries into summary candidates and the verbatim tail.

        Args:
            entries: Raw log entries, oldest first.
            max_unsummarized: Tail budget; anything but a positive integer disables it.
            max_summarized: Head budget; anything but a positive integer disables it.

        Returns:
            ``(summary_candidates, tail)``, each in chronological order.
        """
        tail_budget = coerce_positive_int(max_unsummarized, 0)
        head_budget = coerce_positive_int(max_summarized, 0)
        total = tail_budget + head_budget
        if total == 0:
            return [], []

        relevant = [entry for entry in coerce_history(entries) if entry is not None and entry.is_relevant]
        limited = relevant[-total:]
        tail_count = min(tail_budget, len(limited))
        if tail_count == 0:
            return limited, []
        return limited[:-tail_count], limited[-tail_count:]

    def render(self, entries: Iterable[Any], max_unsummarized: Any, max_summarized: Any) -> str:
        """Render the windowed transcript.

        Summary lines come first, then tail lines, each in chronological
        order. An empty transcript becomes ``"No significant prior events."``.
        """
        head, tail = self.window(entries, max_unsummarized, max_summarized)

        lines: list[str] = []
        for entry in head:
            summary = (entry.summary or "").strip()
            if summary:
                lines.append(f"{summary}{self._annotations(entry)}")
        for entry in tail:
            content = (entry.content or "").strip()
            if content:
                lines.append(f"[{_role(entry)}] {content}{self._annotations(entry)}")

        return "\n".join(lines) if lines else EMPTY_HISTORY_TEXT

    def render_slim(self, entries: Iterable[Any], max_unsummarized: Any = None, max_summarized: Any = None) -> str:
        """Render the short transcript used by slim contexts.

        The last ``max_unsummarized + max_summarized`` log entries (10 and 5
        when unset) become ``"[<role>] <summary or content>"`` lines, with no
        annotations and no relevance filtering beyond dropping empty text.
        """
        tail_budget = coerce_positive_int(max_unsummarized, SLIM_DEFAULT_MAX_UNSUMMARIZED)
        head_budget = coerce_positive_int(max_summarized, SLIM_DEFAULT_MAX_SUMMARIZED)
        recent = coerce_history(entries)[-(tail_budget + head_budget):]

        lines: list[str] = []
        for entry in recent:
            if entry is None:
                continue
            text = (entry.summary or entry.content or "").strip()
            if text:
                lines.append(f"[{entry.role or DEFAULT_HISTORY_ROLE}] {text}")
        return "\n".join(lines) if lines else EMPTY_HISTORY_TEXT


__all__ = [
    "HistoryWindower",
    "location_display_name",
]
