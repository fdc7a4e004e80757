"""Events handled by the puzzle session controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MoveOutcome(str, Enum):
    """Result of feeding a board event to the controller."""
    SNAPBACK = "snapback"  # illegal, piece returns to its square
    PROMOTION_PENDING = "promotion_pending"
    CONTINUE = "continue"  # correct line move, more to play
    SOLVED = "solved"
    INCORRECT = "incorrect"
    IGNORED = "ignored"


@dataclass(frozen=True)
class MoveDropped:
    source: str
    target: str


@dataclass(frozen=True)
class PromotionChosen:
    piece: str  # "q", "r", "b" or "n"


@dataclass(frozen=True)
class PromotionCancelled:
    pass


@dataclass(frozen=True)
class NextRequested:
    pass


@dataclass(frozen=True)
class PreviousRequested:
    pass


@dataclass(frozen=True)
class PuzzleRequested:
    index: int


TrainerEvent = (
    MoveDropped
    | PromotionChosen
    | PromotionCancelled
    | NextRequested
    | PreviousRequested
    | PuzzleRequested
)
