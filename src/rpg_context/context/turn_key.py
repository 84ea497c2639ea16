"""Turn key resolution.

A turn key identifies the current game turn for cache scoping. It is
``"<player_id>:<turn_token>"`` when the caller supplies a turn token, and
``"<player_id>:<history_length>:<marker>"`` otherwise, where the marker is
the last history entry's turn id, timestamp or id.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rpg_context.context.adapters import read_field
from rpg_context.context.ports import WorldSources
from rpg_context.core.constants import NO_PLAYER_ID
from rpg_context.core.logging import get_logger
from rpg_context.models.history import HistoryEntry


logger = get_logger(__name__)


def derive_turn_key(player_id: Any, turn_token: Any, history: Sequence[Any]) -> str:
    """Compose a turn key from already-fetched inputs.

    Args:
        player_id: Current player id; falsy values become ``"no-player"``.
        turn_token: Explicit turn token; used verbatim when truthy.
        history: The chat/event log.

    Returns:
        The turn key string.
    """
    player_part = player_id or NO_PLAYER_ID
    if turn_token:
        return f"{player_part}:{turn_token}"

    marker: Any = ""
    if history:
        last = HistoryEntry.coerce(history[-1])
        if last is not None:
            marker = last.turn_marker
    return f"{player_part}:{len(history)}:{marker}"


class TurnKeyResolver:
    """Resolve the current turn key from the world accessors.

    The resolver never raises: a failing accessor degrades its component
    to the sentinel or empty value and is logged.
    """

    def __init__(self, sources: WorldSources) -> None:
        self._sources = sources

    def __call__(self) -> str:
        return self.resolve()

    def resolve(self) -> str:
        """Compute the turn key for the current state of the world."""
        player_id = self._player_id()
        token = self._turn_token()
        history = self._history() if not token else []
        return derive_turn_key(player_id, token, history)

    def _player_id(self) -> Any:
        try:
            return read_field(self._sources.current_player(), "id")
        except Exception as exc:
            logger.warning("Failed to resolve current player", operation="turn_key.player", error=str(exc))
            return None

    def _turn_token(self) -> Any:
        try:
            return self._sources.current_turn_token()
        except Exception as exc:
            logger.warning("Failed to resolve turn token", operation="turn_key.token", error=str(exc))
            return None

    def _history(self) -> list[Any]:
        try:
            return list(self._sources.chat_history() or [])
        except Exception as exc:
            logger.warning("Failed to read chat history", operation="turn_key.history", error=str(exc))
            return []


__all__ = [
    "TurnKeyResolver",
    "derive_turn_key",
]
