"""
Puzzle Data Types and Schemas

Defines the data structures shared by the trainer: puzzles, the per-puzzle
session state and per-player statistics records.
Puzzles serialize with to_dict (the importer parses them back); statistics
records round-trip through to_dict/from_dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class SessionPhase(str, Enum):
    """
    Lifecycle of the active puzzle.

    - EMPTY: no puzzle loaded (empty set or cleared display)
    - AWAITING_MOVE: the player is expected to move
    - SOLVED: solution/line completed, advance is scheduled
    - ALL_SOLVED: the last puzzle was solved (terminal)
    """
    EMPTY = "empty"
    AWAITING_MOVE = "awaiting_move"
    SOLVED = "solved"
    ALL_SOLVED = "all_solved"


@dataclass
class Puzzle:
    """
    A single trainer puzzle.

    Either a one-move puzzle (any SAN in `solution` is accepted) or a
    multi-move puzzle driven by `line`, which alternates player moves and
    scripted opponent replies.
    """
    id: int

    # Position to solve, in FEN
    fen: str

    # Acceptable answers in SAN (non-empty)
    solution: List[str]

    # Optional alternating player/opponent SAN sequence
    line: Optional[List[str]] = None

    @property
    def uses_line(self) -> bool:
        return bool(self.line)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "fen": self.fen,
            "solution": list(self.solution),
        }
        if self.line:
            data["line"] = list(self.line)
        return data


@dataclass(frozen=True)
class PendingPromotion:
    """A pawn move held back until the player picks a promotion piece."""
    source: str
    target: str
    color: str  # "w" or "b"


@dataclass
class PuzzleSession:
    """
    Progress through the active puzzle.

    Reset every time a puzzle loads; mutated only by the controller.
    """
    active_index: int = 0
    line_step: int = 0
    pending_promotion: Optional[PendingPromotion] = None
    phase: SessionPhase = SessionPhase.EMPTY

    def reset(self, index: int) -> None:
        """Start a fresh attempt at the puzzle at `index`."""
        self.active_index = index
        self.line_step = 0
        self.pending_promotion = None
        self.phase = SessionPhase.AWAITING_MOVE


@dataclass
class Counts:
    """Attempt counters; attempts == correct + wrong at all times."""
    attempts: int = 0
    correct: int = 0
    wrong: int = 0

    def record(self, was_correct: bool) -> None:
        self.attempts += 1
        if was_correct:
            self.correct += 1
        else:
            self.wrong += 1

    def to_dict(self) -> dict:
        return {"attempts": self.attempts, "correct": self.correct, "wrong": self.wrong}

    @classmethod
    def from_dict(cls, data: dict) -> Counts:
        """Parse stored counters. Raises ValueError on a malformed shape."""
        if not isinstance(data, dict):
            raise ValueError("counts must be an object")
        values = {}
        for key in ("attempts", "correct", "wrong"):
            v = data.get(key, 0)
            if isinstance(v, bool) or not isinstance(v, int) or v < 0:
                raise ValueError(f"invalid {key} count: {v!r}")
            values[key] = v
        counts = cls(**values)
        if counts.attempts != counts.correct + counts.wrong:
            raise ValueError("attempts must equal correct + wrong")
        return counts


@dataclass
class PlayerRecord:
    """
    Statistics for one player.

    Puzzle keys are stringified puzzle ids so the record survives a JSON
    round-trip unchanged.
    """
    overall: Counts = field(default_factory=Counts)
    puzzles: Dict[str, Counts] = field(default_factory=dict)

    def for_puzzle(self, puzzle_id: int | str) -> Counts:
        """Counters for a puzzle, zero-initialized on first sight."""
        key = str(puzzle_id)
        if key not in self.puzzles:
            self.puzzles[key] = Counts()
        return self.puzzles[key]

    def record(self, puzzle_id: int | str, was_correct: bool) -> None:
        self.overall.record(was_correct)
        self.for_puzzle(puzzle_id).record(was_correct)

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.to_dict(),
            "puzzles": {pid: c.to_dict() for pid, c in self.puzzles.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> PlayerRecord:
        """Parse a stored record. Raises ValueError on a malformed shape."""
        if not isinstance(data, dict):
            raise ValueError("player record must be an object")
        puzzles = data.get("puzzles") or {}
        if not isinstance(puzzles, dict):
            raise ValueError("puzzles must be an object")
        return cls(
            overall=Counts.from_dict(data.get("overall") or {}),
            puzzles={str(pid): Counts.from_dict(c) for pid, c in puzzles.items()},
        )
