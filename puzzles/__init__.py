"""
Chess Puzzle Trainer

Puzzle sets with single-move solutions or scripted lines, a session
controller that judges moves, per-player statistics and puzzle authoring.

Move legality is delegated to python-chess; everything here is bookkeeping.
"""

from .puzzle_types import Counts, PendingPromotion, PlayerRecord, Puzzle, PuzzleSession, SessionPhase
from .importer import ParseError, PuzzleImportError, SchemaError, normalize_puzzles, parse_puzzle_file
from .interfaces import EngineUnavailableError, MoveRecord, PuzzleLoadError, PuzzleTrainerError, StatusView
from .events import MoveOutcome
from .chess_engine import ChessRulesEngine
from .scheduler import DeadlineScheduler
from .storage import JsonStore, PuzzleStorage
from .stats import StatisticsTracker
from .session import PuzzleController
from .manager import ManagerResult, PuzzleSetManager
from .trainer import TrainerApp

__all__ = [
    # Types
    "Counts",
    "PendingPromotion",
    "PlayerRecord",
    "Puzzle",
    "PuzzleSession",
    "SessionPhase",
    "MoveRecord",
    "MoveOutcome",
    "StatusView",
    # Errors
    "PuzzleImportError",
    "ParseError",
    "SchemaError",
    "PuzzleTrainerError",
    "EngineUnavailableError",
    "PuzzleLoadError",
    # Functions
    "parse_puzzle_file",
    "normalize_puzzles",
    # Classes
    "ChessRulesEngine",
    "DeadlineScheduler",
    "JsonStore",
    "PuzzleStorage",
    "StatisticsTracker",
    "PuzzleController",
    "PuzzleSetManager",
    "ManagerResult",
    "TrainerApp",
]
