"""Persistent key-value storage for puzzle sets, statistics and players.

Each key is one JSON document under the data directory. Reads never raise:
missing or corrupt documents are reported as absent so the app falls back
to its defaults.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from puzzles.config import PLAYERS_KEY, PUZZLES_KEY, STATS_KEY
from puzzles.importer import PuzzleImportError, normalize_puzzles
from puzzles.puzzle_types import PlayerRecord, Puzzle

logger = logging.getLogger(__name__)


class JsonStore:
    """JSON documents keyed by name, one file per key."""

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable %s (%s)", path, e)
            return None

    def set(self, key: str, value: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class PuzzleStorage:
    """Typed access to the trainer's three documents."""

    def __init__(self, store: JsonStore):
        self.store = store

    # -- puzzle set --------------------------------------------------------

    def load_puzzles(self) -> List[Puzzle] | None:
        data = self.store.get(PUZZLES_KEY)
        if data is None:
            return None
        try:
            return normalize_puzzles(data)
        except PuzzleImportError as e:
            logger.warning("Stored puzzle set is invalid, ignoring it (%s)", e)
            return None

    def save_puzzles(self, puzzles: List[Puzzle]) -> None:
        self.store.set(PUZZLES_KEY, [p.to_dict() for p in puzzles])

    # -- statistics --------------------------------------------------------

    def load_stats(self) -> Dict[str, PlayerRecord]:
        data = self.store.get(STATS_KEY)
        if not isinstance(data, dict):
            return {}
        records: Dict[str, PlayerRecord] = {}
        for player, raw in data.items():
            try:
                records[str(player)] = PlayerRecord.from_dict(raw)
            except ValueError as e:
                logger.warning("Dropping malformed stats for %r (%s)", player, e)
        return records

    def save_stats(self, records: Dict[str, PlayerRecord]) -> None:
        self.store.set(STATS_KEY, {name: r.to_dict() for name, r in records.items()})

    # -- roster ------------------------------------------------------------

    def load_players(self) -> List[str] | None:
        data = self.store.get(PLAYERS_KEY)
        if not isinstance(data, list):
            return None
        players: List[str] = []
        for name in data:
            if isinstance(name, str) and name.strip() and name.strip() not in players:
                players.append(name.strip())
        return players or None

    def save_players(self, players: List[str]) -> None:
        self.store.set(PLAYERS_KEY, list(players))
