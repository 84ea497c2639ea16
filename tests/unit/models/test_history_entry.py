"""Tests for history entry coercion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rpg_context.models.history import HistoryEntry, coerce_history


class TestCoerce:
    """Tests for building entries from raw log shapes."""

    def test_camel_case_keys(self) -> None:
        entry = HistoryEntry.coerce(
            {
                "role": "user",
                "content": "Hello",
                "turnId": "t-1",
                "type": "player-action",
                "isNpcTurn": True,
                "locationId": "loc-1",
            }
        )

        assert entry is not None
        assert entry.turn_id == "t-1"
        assert entry.entry_type == "player-action"
        assert entry.is_npc_turn is True
        assert entry.location_id == "loc-1"

    def test_snake_case_keys(self) -> None:
        entry = HistoryEntry.coerce({"turn_id": "t-2", "random_event": True, "entry_type": "random-event"})

        assert entry is not None
        assert entry.turn_id == "t-2"
        assert entry.random_event is True
        assert entry.entry_type == "random-event"

    def test_plain_object(self) -> None:
        @dataclass
        class Logged:
            role: str
            content: str

        entry = HistoryEntry.coerce(Logged(role="assistant", content="Rain falls."))

        assert entry is not None
        assert entry.role == "assistant"

    def test_unusable_values(self) -> None:
        assert HistoryEntry.coerce(None) is None
        assert HistoryEntry.coerce({}) is None
        assert HistoryEntry.coerce(42) is None

    def test_lenient_fields(self) -> None:
        """Non-text content and truthy non-bool flags are ignored."""
        entry = HistoryEntry.coerce({"content": 5, "travel": "yes", "metadata": ["x"]})

        assert entry is not None
        assert entry.content is None
        assert entry.travel is False
        assert entry.metadata == {}
        assert not entry.is_relevant


class TestDerivedFields:
    """Tests for computed properties."""

    def test_turn_marker_precedence(self) -> None:
        assert HistoryEntry(turn_id="t", timestamp=5, id="e").turn_marker == "t"
        assert HistoryEntry(timestamp=5, id="e").turn_marker == 5
        assert HistoryEntry(id="e").turn_marker == "e"
        assert HistoryEntry().turn_marker == ""

    def test_witness_names(self) -> None:
        assert HistoryEntry(metadata={"npcNames": ["Mira", 3]}).witness_names == ["Mira", "3"]
        assert HistoryEntry(metadata={"npc_names": "Mira"}).witness_names == []

    def test_resolved_location_id(self) -> None:
        assert HistoryEntry(location_id=" loc-1 ").resolved_location_id == "loc-1"
        assert HistoryEntry(location_id="  ", metadata={"locationId": "loc-2"}).resolved_location_id == "loc-2"
        assert HistoryEntry().resolved_location_id == ""


def test_coerce_history_keeps_positions() -> None:
    raw: list[Any] = [{"content": "a"}, None, {"content": "b"}]
    coerced = coerce_history(raw)

    assert len(coerced) == 3
    assert coerced[1] is None
    assert coerce_history(None) == []
    assert coerce_history(7) == []
