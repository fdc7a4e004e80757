from __future__ import annotations

from typing import List, Optional

import pytest

from puzzles.chess_engine import ChessRulesEngine
from puzzles.interfaces import BoardConfig, StatusView
from puzzles.puzzle_types import Puzzle
from puzzles.scheduler import DeadlineScheduler
from puzzles.session import PuzzleController
from puzzles.stats import StatisticsTracker
from puzzles.storage import JsonStore, PuzzleStorage

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
# 1.e4 e5 2.Qh5 Nc6 - Qxf7+ is check but not mate
QXF7_FEN = "r1bqkbnr/pppp1ppp/2n5/4p2Q/4P3/8/PPPP1PPP/RNB1KBNR w KQkq - 2 3"
# White pawn on a7 ready to promote, black king out of the way
PROMOTION_FEN = "8/P7/7k/8/8/8/8/K7 w - - 0 1"


class RecordingBoard:
    def __init__(self) -> None:
        self.config: Optional[BoardConfig] = None
        self.positions: List[str] = []
        self.resizes = 0

    @property
    def fen(self) -> Optional[str]:
        return self.positions[-1] if self.positions else None

    def configure(self, config: BoardConfig) -> None:
        self.config = config
        self.positions.append(config.position)

    def set_position(self, fen: str, animate: bool = False) -> None:
        self.positions.append(fen)

    def resize(self) -> None:
        self.resizes += 1


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: List[str] = []
        self.status: Optional[StatusView] = None

    def notify(self, message: str) -> None:
        self.messages.append(message)

    def set_status(self, status: Optional[StatusView]) -> None:
        self.status = status


class RecordingSounds:
    def __init__(self) -> None:
        self.played: List[str] = []

    def play(self, name: str) -> None:
        self.played.append(name)


class ManualClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def storage(tmp_path) -> PuzzleStorage:
    return PuzzleStorage(JsonStore(tmp_path / "data"))


@pytest.fixture
def tracker(storage) -> StatisticsTracker:
    return StatisticsTracker(storage, default_player="Tester")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_controller(tracker, clock):
    """Build a controller with recording collaborators around `puzzles`."""

    def _make(puzzles: List[Puzzle], load: bool = True) -> PuzzleController:
        controller = PuzzleController(
            engine_factory=ChessRulesEngine,
            board=RecordingBoard(),
            tracker=tracker,
            notifier=RecordingNotifier(),
            sounds=RecordingSounds(),
            scheduler=DeadlineScheduler(clock=clock),
            puzzles=puzzles,
            advance_delay_s=0.8,
        )
        if load and puzzles:
            controller.load_puzzle(0)
        return controller

    return _make
