"""Application state: wires storage, statistics, session and manager together."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from puzzles.chess_engine import ChessRulesEngine
from puzzles.config import Settings, get_settings
from puzzles.importer import PuzzleImportError, load_default_puzzles, parse_puzzle_file
from puzzles.interfaces import BoardView, Notifier, SoundPlayer
from puzzles.manager import PuzzleSetManager
from puzzles.scheduler import DeadlineScheduler
from puzzles.session import EngineFactory, PuzzleController
from puzzles.stats import StatisticsTracker
from puzzles.storage import JsonStore, PuzzleStorage

logger = logging.getLogger(__name__)

LOAD_FAILED_STATUS = "Failed to load puzzles.json"


class TrainerApp:
    """Everything one trainer user works with, held in a single object."""

    def __init__(
        self,
        *,
        board: BoardView,
        notifier: Notifier,
        sounds: SoundPlayer,
        settings: Optional[Settings] = None,
        scheduler: Optional[DeadlineScheduler] = None,
        engine_factory: Optional[EngineFactory] = ChessRulesEngine,
        data_dir: Optional[Path] = None,
    ):
        self.settings = settings or get_settings()
        self.notifier = notifier
        self.sounds = sounds
        self.board = board
        self.scheduler = scheduler or DeadlineScheduler()
        self.storage = PuzzleStorage(JsonStore(data_dir or self.settings.puzzle_data_dir))
        self.tracker = StatisticsTracker(self.storage, self.settings.default_player)
        self.controller = PuzzleController(
            engine_factory=engine_factory,
            board=board,
            tracker=self.tracker,
            notifier=notifier,
            sounds=sounds,
            scheduler=self.scheduler,
            advance_delay_s=self.settings.advance_delay_s,
            piece_theme=self.settings.piece_theme,
            board_size=self.settings.board_size,
        )
        self.manager = PuzzleSetManager(self.controller, self.storage)

    def start(self) -> None:
        """Load the stored puzzle set, or the default file on first run."""
        stored = self.storage.load_puzzles()
        if stored:
            self.controller.replace_puzzles(stored)
            return

        source = self.settings.default_puzzles_source
        try:
            puzzles = load_default_puzzles(source)
        except PuzzleImportError:
            logger.exception("Could not load default puzzles from %s", source)
            self.controller.clear(LOAD_FAILED_STATUS)
            return

        self.storage.save_puzzles(puzzles)
        self.controller.replace_puzzles(puzzles)

    def apply_upload(self, text: str | bytes) -> bool:
        """Replace the puzzle set with an uploaded file; all-or-nothing."""
        try:
            puzzles = parse_puzzle_file(text)
        except PuzzleImportError as e:
            logger.warning("Rejected puzzle file: %s", e)
            self.notifier.notify(f"Invalid puzzle file:\n{e}")
            return False

        self.storage.save_puzzles(puzzles)
        self.controller.replace_puzzles(puzzles)
        logger.info("Imported %d puzzles", len(puzzles))
        return True

    def tick(self) -> int:
        """Run scheduled work that has come due (the auto-advance timer)."""
        return self.scheduler.run_due()
