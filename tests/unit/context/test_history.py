"""Tests for transcript windowing."""

from __future__ import annotations

from typing import Any

import pytest

from rpg_context.context.history import HistoryWindower
from rpg_context.models.history import HistoryEntry


def _entries(count: int) -> list[dict[str, Any]]:
    return [{"role": "user", "content": f"content {i}", "summary": f"summary {i}"} for i in range(count)]


class TestWindowing:
    """Tests for head/tail budgets."""

    def test_one_summary_then_two_tail_lines(self) -> None:
        """With budgets 2/1 and five entries: one summary line, then two verbatim lines."""
        transcript = HistoryWindower().render(_entries(5), max_unsummarized=2, max_summarized=1)

        assert transcript.splitlines() == [
            "summary 2",
            "[user] content 3",
            "[user] content 4",
        ]

    def test_no_qualifying_entries(self) -> None:
        """Entries with neither content nor summary are ignored entirely."""
        transcript = HistoryWindower().render([{"role": "user"}, None, {"content": ""}], 5, 5)
        assert transcript == "No significant prior events."

    def test_zero_budgets(self) -> None:
        assert HistoryWindower().render(_entries(3), 0, 0) == "No significant prior events."

    def test_tail_disabled(self) -> None:
        """With no tail budget every windowed entry renders from its summary."""
        transcript = HistoryWindower().render(_entries(4), max_unsummarized=0, max_summarized=2)
        assert transcript.splitlines() == ["summary 2", "summary 3"]

    def test_summary_candidates_without_summary_are_dropped(self) -> None:
        entries = [{"content": "no summary"}, {"role": " ", "content": "tail"}]
        assert HistoryWindower().render(entries, 1, 1) == "[system] tail"

    @pytest.mark.parametrize("budget", [-1, "3x", None, 2.5])
    def test_invalid_budgets_disable(self, budget: Any) -> None:
        assert HistoryWindower().render(_entries(2), budget, budget) == "No significant prior events."

    def test_window_split(self) -> None:
        head, tail = HistoryWindower().window(_entries(3), 5, 5)
        assert head == []
        assert [entry.content for entry in tail] == ["content 0", "content 1", "content 2"]


class TestAnnotations:
    """Tests for location and witness suffixes."""

    @pytest.fixture
    def windower(self) -> HistoryWindower:
        locations = {"loc-1": {"name": "Harbor"}}
        return HistoryWindower(locations, lambda location_id: {"name": "Lighthouse"} if location_id == "loc-2" else None)

    def test_player_action_gets_location(self, windower: HistoryWindower) -> None:
        entry = HistoryEntry.model_validate({"type": "player-action", "locationId": "loc-1"})
        assert windower.location_suffix(entry) == " [location: Harbor]"

    def test_fallback_lookup_and_metadata_location(self, windower: HistoryWindower) -> None:
        entry = HistoryEntry.model_validate({"random_event": True, "metadata": {"location_id": " loc-2 "}})
        assert windower.location_suffix(entry) == " [location: Lighthouse]"

    def test_plain_entries_get_no_location(self, windower: HistoryWindower) -> None:
        entry = HistoryEntry.model_validate({"type": "narration", "locationId": "loc-1"})
        assert windower.location_suffix(entry) == ""

    def test_unresolvable_location(self, windower: HistoryWindower) -> None:
        entry = HistoryEntry.model_validate({"isNpcTurn": True, "locationId": "loc-404"})
        assert windower.location_suffix(entry) == ""

    def test_failing_lookup_is_absorbed(self) -> None:
        def lookup(location_id: str) -> Any:
            raise KeyError(location_id)

        entry = HistoryEntry.model_validate({"type": "player-action", "locationId": "loc-9"})
        assert HistoryWindower({}, lookup).location_suffix(entry) == ""

    def test_witnesses(self) -> None:
        entry = HistoryEntry.model_validate({"metadata": {"npcNames": ["Mira", "Bram"]}})
        assert HistoryWindower.witness_suffix(entry) == " [Seen by Mira, Bram]"

    def test_travel_has_no_witnesses(self) -> None:
        entry = HistoryEntry.model_validate({"travel": True, "metadata": {"npc_names": ["Mira"]}})
        assert HistoryWindower.witness_suffix(entry) == ""

    def test_suffix_order_in_rendered_lines(self, windower: HistoryWindower) -> None:
        entries = [
            {
                "role": "user",
                "content": "I look around.",
                "type": "player-action",
                "location_id": "loc-1",
                "metadata": {"npc_names": ["Mira"]},
            }
        ]
        assert windower.render(entries, 1, 0) == "[user] I look around. [location: Harbor] [Seen by Mira]"


class TestSlimTranscript:
    """Tests for the short slim-context transcript."""

    def test_default_budgets(self) -> None:
        """Unset budgets mean the last fifteen entries."""
        transcript = HistoryWindower().render_slim(_entries(20))
        lines = transcript.splitlines()
        assert len(lines) == 15
        assert lines[0] == "[user] summary 5"

    def test_summary_preferred_and_role_default(self) -> None:
        entries = [{"content": "raw"}, {"role": "assistant", "summary": "short", "content": "long"}, {"content": "  "}]
        assert HistoryWindower().render_slim(entries, 2, 1) == "[system] raw\n[assistant] short"

    def test_empty(self) -> None:
        assert HistoryWindower().render_slim([]) == "No significant prior events."
