"""Contracts for the trainer's external collaborators.

The session controller only talks to a rules engine, a board view, a sound
player and a notifier through these protocols, so tests can substitute
recording fakes and the UI layer can plug in Streamlit implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class PuzzleTrainerError(Exception):
    """Base class for fatal trainer errors."""


class EngineUnavailableError(PuzzleTrainerError):
    """No rules-engine constructor is configured."""


class PuzzleLoadError(PuzzleTrainerError):
    """A puzzle position could not be loaded into the rules engine."""


@dataclass(frozen=True)
class MoveRecord:
    """A move accepted by the rules engine."""
    san: str
    uci: str
    source: str
    target: str
    color: str  # "w" or "b"
    captured: bool = False
    promotion: Optional[str] = None  # "q", "r", "b", "n"

    @property
    def is_promotion(self) -> bool:
        return self.promotion is not None


@dataclass(frozen=True)
class BoardConfig:
    """Board-view construction options."""
    position: str
    orientation: str = "white"
    draggable: bool = True
    piece_theme: str = ""
    size: int = 400


@dataclass(frozen=True)
class StatusView:
    """Text shown under the board."""
    text: str
    fen: str = ""
    pgn: str = ""


class RulesEngine(Protocol):
    def move(self, source: str, target: str, promotion: str = "q") -> Optional[MoveRecord]: ...

    def move_san(self, san: str) -> Optional[MoveRecord]: ...

    def undo(self) -> Optional[MoveRecord]: ...

    def turn(self) -> str: ...

    def is_game_over(self) -> bool: ...

    def in_check(self) -> bool: ...

    def in_checkmate(self) -> bool: ...

    def in_draw(self) -> bool: ...

    def fen(self) -> str: ...

    def pgn(self) -> str: ...


class BoardView(Protocol):
    def configure(self, config: BoardConfig) -> None: ...

    def set_position(self, fen: str, animate: bool = False) -> None: ...

    def resize(self) -> None: ...


class SoundPlayer(Protocol):
    def play(self, name: str) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...

    def set_status(self, status: Optional[StatusView]) -> None: ...
