"""Read-only chat/event log entries.

The game loop appends entries as dictionaries or objects whose keys may be
snake_case or camelCase; :meth:`HistoryEntry.coerce` folds both into one
model so the windower and turn-key resolver never inspect raw shapes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from rpg_context.core.logging import get_logger


logger = get_logger(__name__)


class HistoryEntry(BaseModel):
    """A single entry of the append-only game log.

    Attributes:
        role: Speaker role ("user", "assistant", "system", ...).
        content: Verbatim text of the entry.
        summary: Condensed text used when the entry falls in the summary head.
        turn_id: Identifier of the turn that produced the entry.
        timestamp: When the entry was recorded.
        id: Entry identifier.
        entry_type: Classification such as "player-action" or "random-event".
        random_event: Marks world events generated by the engine.
        is_npc_turn: Marks entries produced by an NPC acting on its own.
        travel: Marks travel narration (never annotated with witnesses).
        location_id: Where the entry happened.
        metadata: Free-form metadata (witness names, location id).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    role: str | None = None
    content: str | None = None
    summary: str | None = None
    turn_id: Any = None
    timestamp: Any = None
    id: Any = None
    entry_type: str | None = Field(default=None, alias="type")
    random_event: bool = False
    is_npc_turn: bool = False
    travel: bool = False
    location_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("role", "content", "summary", "entry_type", "location_id", mode="before")
    @classmethod
    def drop_non_text(cls, value: Any) -> str | None:
        """Non-string text fields carry no renderable content."""
        return value if isinstance(value, str) else None

    @field_validator("random_event", "is_npc_turn", "travel", mode="before")
    @classmethod
    def strict_flag(cls, value: Any) -> bool:
        return value is True

    @field_validator("metadata", mode="before")
    @classmethod
    def mapping_metadata(cls, value: Any) -> dict[str, Any]:
        return dict(value) if isinstance(value, Mapping) else {}

    @property
    def is_relevant(self) -> bool:
        """Whether the entry has any content or summary at all."""
        return bool(self.content or self.summary)

    @property
    def turn_marker(self) -> Any:
        """First available of turn id, timestamp and entry id."""
        return self.turn_id or self.timestamp or self.id or ""

    @property
    def witness_names(self) -> list[str]:
        names = self.metadata.get("npc_names", self.metadata.get("npcNames"))
        if not isinstance(names, list):
            return []
        return [str(name) for name in names]

    @property
    def resolved_location_id(self) -> str:
        """Trimmed location id from the entry itself, else from its metadata."""
        if self.location_id and self.location_id.strip():
            return self.location_id.strip()
        raw = self.metadata.get("location_id", self.metadata.get("locationId"))
        if isinstance(raw, str) and raw.strip():
            return raw.strip()
        return ""

    @classmethod
    def coerce(cls, raw: Any) -> HistoryEntry | None:
        """Build an entry from a model, mapping or plain object.

        Args:
            raw: Any log entry representation.

        Returns:
            The entry, or None when ``raw`` is empty or unusable.
        """
        if isinstance(raw, HistoryEntry):
            return raw
        if not raw:
            return None
        if isinstance(raw, Mapping):
            data: Any = dict(raw)
        elif isinstance(raw, BaseModel):
            data = raw.model_dump()
        elif hasattr(raw, "__dict__"):
            data = vars(raw)
        else:
            return None
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed history entry",
                operation="coerce_history_entry",
                error=str(exc),
            )
            return None


def coerce_history(entries: Any) -> list[HistoryEntry | None]:
    """Coerce a raw history sequence, keeping positions (unusable entries become None)."""
    if not isinstance(entries, (list, tuple)):
        try:
            entries = list(entries or [])
        except TypeError:
            return []
    return [HistoryEntry.coerce(entry) for entry in entries]


__all__ = [
    "HistoryEntry",
    "coerce_history",
]
