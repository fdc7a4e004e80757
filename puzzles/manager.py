"""Puzzle set authoring: add, update, delete and export puzzles."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from puzzles.puzzle_types import Puzzle
from puzzles.session import PuzzleController
from puzzles.storage import PuzzleStorage

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "puzzles.json"
EXPORT_MIME = "application/json"
INVALID_FEN_MESSAGE = "Invalid FEN"


@dataclass(frozen=True)
class ManagerResult:
    ok: bool
    message: str


def split_solution(solution_csv: str) -> List[str]:
    """'Qxf7+, Qxf7' -> ['Qxf7+', 'Qxf7']"""
    return [s.strip() for s in (solution_csv or "").split(",") if s.strip()]


def _parse_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value or None
    try:
        return int(str(value).strip()) or None
    except (TypeError, ValueError):
        return None


class PuzzleSetManager:
    """
    Form-driven CRUD over the controller's puzzle set.

    Form problems come back as a failed ManagerResult; nothing is mutated or
    persisted in that case.
    """

    def __init__(self, controller: PuzzleController, storage: PuzzleStorage):
        self.controller = controller
        self.storage = storage

    @property
    def puzzles(self) -> List[Puzzle]:
        return self.controller.puzzles

    def _persist(self) -> None:
        self.storage.save_puzzles(self.puzzles)

    def _fen_loads(self, fen: str) -> bool:
        factory = self.controller.engine_factory
        if factory is None:
            # load_puzzle reports the missing engine itself
            return True
        try:
            factory(fen)
        except ValueError:
            return False
        return True

    def entries(self) -> List[dict]:
        return [
            {"id": p.id, "fen": p.fen, "solution": ", ".join(p.solution), "line": " ".join(p.line or [])}
            for p in self.puzzles
        ]

    def form_values(self, puzzle_id: int) -> Optional[dict]:
        """Prefill values for editing a puzzle."""
        idx = self.controller.find_index(puzzle_id)
        if idx < 0:
            return None
        p = self.puzzles[idx]
        return {"id": p.id, "fen": p.fen, "solution": ",".join(p.solution)}

    def add(self, fen: str, solution_csv: str) -> ManagerResult:
        fen = (fen or "").strip()
        solution = split_solution(solution_csv)
        if not fen or not solution:
            return ManagerResult(False, "Enter a FEN and a solution")
        if not self._fen_loads(fen):
            return ManagerResult(False, INVALID_FEN_MESSAGE)

        new_id = max([p.id or 0 for p in self.puzzles] + [0]) + 1
        self.puzzles.append(Puzzle(id=new_id, fen=fen, solution=solution))
        self._persist()
        logger.info("Added puzzle #%d", new_id)

        if len(self.puzzles) == 1:
            self.controller.load_puzzle(0)
        return ManagerResult(True, "Puzzle added")

    def update(self, puzzle_id: Any, fen: str, solution_csv: str) -> ManagerResult:
        pid = _parse_id(puzzle_id)
        fen = (fen or "").strip()
        solution = split_solution(solution_csv)
        if pid is None or not fen or not solution:
            return ManagerResult(False, "Enter an ID, a FEN and a solution")

        idx = self.controller.find_index(pid)
        if idx < 0:
            return ManagerResult(False, "Unknown puzzle ID")
        if not self._fen_loads(fen):
            return ManagerResult(False, INVALID_FEN_MESSAGE)

        puzzle = self.puzzles[idx]
        puzzle.fen = fen
        puzzle.solution = solution
        self._persist()
        logger.info("Updated puzzle #%d", pid)

        active = self.controller.active_puzzle
        if active is not None and active.id == pid:
            self.controller.load_puzzle(self.controller.session.active_index)
        return ManagerResult(True, "Puzzle saved")

    def delete(self, puzzle_id: Any, confirm: Callable[[str], bool]) -> ManagerResult:
        pid = _parse_id(puzzle_id)
        if pid is None:
            return ManagerResult(False, "Unknown puzzle ID")
        if not confirm(f"Delete puzzle #{pid}?"):
            return ManagerResult(False, "Delete cancelled")

        self.controller.puzzles = [p for p in self.puzzles if p.id != pid]
        self._persist()
        logger.info("Deleted puzzle #%d", pid)

        if not self.puzzles:
            self.controller.clear()
            return ManagerResult(True, "Puzzle deleted")

        index = min(self.controller.session.active_index, len(self.puzzles) - 1)
        self.controller.load_puzzle(max(0, index))
        return ManagerResult(True, "Puzzle deleted")

    def export(self) -> str:
        """The full puzzle set as indented JSON (offered as EXPORT_FILENAME)."""
        return json.dumps([p.to_dict() for p in self.puzzles], indent=2, ensure_ascii=False)
