"""Per-player attempt statistics and the player roster."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from puzzles.puzzle_types import Counts, PlayerRecord, Puzzle
from puzzles.storage import PuzzleStorage

logger = logging.getLogger(__name__)


class StatisticsTracker:
    """
    Owns the player roster and the player -> PlayerRecord mapping.

    Every mutation persists the whole mapping (or roster) before returning.
    """

    def __init__(self, storage: PuzzleStorage, default_player: str = "Player 1"):
        self.storage = storage
        self.default_player = default_player.strip() or "Player 1"
        self._records: Dict[str, PlayerRecord] = storage.load_stats()

        players = storage.load_players()
        if not players:
            players = [self.default_player]
            storage.save_players(players)
        self._players: List[str] = players
        self._current = players[0]

    # -- roster ------------------------------------------------------------

    @property
    def players(self) -> List[str]:
        return list(self._players)

    @property
    def current_player(self) -> str:
        return self._current

    def select_player(self, name: str) -> None:
        if name in self._players:
            self._current = name

    def add_player(self, name: str) -> Optional[str]:
        """Add (if new) and select a player. Blank names are ignored."""
        name = (name or "").strip()
        if not name:
            return None
        if name not in self._players:
            self._players.append(name)
            self.storage.save_players(self._players)
        self._current = name
        return name

    # -- statistics --------------------------------------------------------

    def record_attempt(self, player: str, puzzle_id: int | str, was_correct: bool) -> PlayerRecord:
        record = self._records.get(player)
        if record is None:
            record = PlayerRecord()
            self._records[player] = record
        record.record(puzzle_id, was_correct)
        self.storage.save_stats(self._records)
        return record

    def reset_player(self, player: str, confirm: Callable[[str], bool]) -> bool:
        """Delete a player's statistics after confirmation. Returns True if removed."""
        if player not in self._records:
            return False
        if not confirm(f"Clear all statistics for {player}?"):
            return False
        del self._records[player]
        self.storage.save_stats(self._records)
        logger.info("Statistics reset for %s", player)
        return True

    def record_for(self, player: str) -> Optional[PlayerRecord]:
        return self._records.get(player)

    def puzzle_rows(self, player: str, puzzles: Iterable[Puzzle]) -> List[dict]:
        """Per-puzzle rows for the stats panel, zeros for untouched puzzles."""
        record = self._records.get(player)
        rows = []
        for p in puzzles:
            counts = record.puzzles.get(str(p.id), Counts()) if record else Counts()
            rows.append({"puzzle": p.id, "fen": p.fen, **counts.to_dict()})
        return rows
