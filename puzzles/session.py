"""
Puzzle Session Controller

Drives one puzzle from load to completion:

    AWAITING_MOVE --correct line move--> AWAITING_MOVE (scripted reply played)
    AWAITING_MOVE --solution / line complete--> SOLVED --delay--> next puzzle
                                                              or ALL_SOLVED
    AWAITING_MOVE --wrong move--> AWAITING_MOVE (move reverted)

Move legality is left to the rules engine; this module only compares the
engine's SAN against the puzzle's solution or line.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from puzzles.events import (
    MoveDropped,
    MoveOutcome,
    NextRequested,
    PreviousRequested,
    PromotionCancelled,
    PromotionChosen,
    PuzzleRequested,
    TrainerEvent,
)
from puzzles.interfaces import (
    BoardConfig,
    BoardView,
    EngineUnavailableError,
    MoveRecord,
    Notifier,
    PuzzleLoadError,
    RulesEngine,
    SoundPlayer,
    StatusView,
)
from puzzles.puzzle_types import PendingPromotion, Puzzle, PuzzleSession, SessionPhase
from puzzles.scheduler import DeadlineScheduler, ScheduledTask
from puzzles.stats import StatisticsTracker

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], RulesEngine]

ALL_DONE_MESSAGE = "All puzzles completed!"
LAST_PUZZLE_MESSAGE = "You reached the last puzzle."
FIRST_PUZZLE_MESSAGE = "You are at the first puzzle."
NO_PUZZLES_STATUS = "No puzzles"


class PuzzleController:
    """Owns the puzzle set and the session state of the active puzzle."""

    def __init__(
        self,
        *,
        engine_factory: Optional[EngineFactory],
        board: BoardView,
        tracker: StatisticsTracker,
        notifier: Notifier,
        sounds: SoundPlayer,
        scheduler: DeadlineScheduler,
        puzzles: Optional[List[Puzzle]] = None,
        advance_delay_s: float = 0.8,
        piece_theme: str = "",
        board_size: int = 400,
    ):
        self.engine_factory = engine_factory
        self.board = board
        self.tracker = tracker
        self.notifier = notifier
        self.sounds = sounds
        self.scheduler = scheduler
        self.advance_delay_s = advance_delay_s
        self.piece_theme = piece_theme
        self.board_size = board_size

        self.puzzles: List[Puzzle] = list(puzzles or [])
        self.session = PuzzleSession()
        self.engine: Optional[RulesEngine] = None
        self._advance_task: Optional[ScheduledTask] = None

    # ------------------------------------------------------------------
    # Puzzle set
    # ------------------------------------------------------------------

    @property
    def active_puzzle(self) -> Optional[Puzzle]:
        if self.session.phase == SessionPhase.EMPTY:
            return None
        if 0 <= self.session.active_index < len(self.puzzles):
            return self.puzzles[self.session.active_index]
        return None

    @property
    def advance_pending(self) -> bool:
        return self._advance_task is not None and self._advance_task.pending

    def find_index(self, puzzle_id: int) -> int:
        """Index of the first puzzle with this id, or -1."""
        for i, p in enumerate(self.puzzles):
            if p.id == puzzle_id:
                return i
        return -1

    def replace_puzzles(self, puzzles: List[Puzzle]) -> None:
        """Swap in a new puzzle set and start from its first puzzle."""
        self.cancel_pending_advance()
        self.puzzles = list(puzzles)
        if self.puzzles:
            self.load_puzzle(0)
        else:
            self.clear()

    def clear(self, status: str = NO_PUZZLES_STATUS) -> None:
        """Drop the active puzzle and show `status` in place of the board status."""
        self.cancel_pending_advance()
        self.engine = None
        self.session = PuzzleSession()
        self.notifier.set_status(StatusView(text=status))

    # ------------------------------------------------------------------
    # Loading / navigation
    # ------------------------------------------------------------------

    def load_puzzle(self, index: int) -> None:
        """Load the puzzle at `index` (bounds are checked by the caller)."""
        if not self.puzzles:
            return
        puzzle = self.puzzles[index]

        if self.engine_factory is None:
            self.notifier.notify("The chess rules engine is not available.")
            raise EngineUnavailableError("No rules engine configured")
        try:
            engine = self.engine_factory(puzzle.fen)
        except ValueError as e:
            self.notifier.notify(f"Puzzle #{puzzle.id} has an invalid position.")
            raise PuzzleLoadError(f"Invalid FEN for puzzle #{puzzle.id}: {e}") from e

        self.cancel_pending_advance()
        self.engine = engine
        self.session.reset(index)
        self.board.configure(
            BoardConfig(
                position=engine.fen(),
                orientation="white" if engine.turn() == "w" else "black",
                draggable=True,
                piece_theme=self.piece_theme,
                size=self.board_size,
            )
        )
        self.board.resize()
        self._publish_status()

    def next_puzzle(self) -> bool:
        if not self.puzzles:
            return False
        if self.session.active_index + 1 < len(self.puzzles):
            self.load_puzzle(self.session.active_index + 1)
            return True
        self.notifier.notify(LAST_PUZZLE_MESSAGE)
        return False

    def previous_puzzle(self) -> bool:
        if not self.puzzles:
            return False
        if self.session.active_index > 0:
            self.load_puzzle(self.session.active_index - 1)
            return True
        self.notifier.notify(FIRST_PUZZLE_MESSAGE)
        return False

    def cancel_pending_advance(self) -> None:
        if self._advance_task is not None:
            self._advance_task.cancel()
            self._advance_task = None

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> Optional[StatusView]:
        puzzle = self.active_puzzle
        engine = self.engine
        if puzzle is None or engine is None:
            return None

        color = "Black" if engine.turn() == "b" else "White"
        text = f"Puzzle #{puzzle.id} | {color} to move"
        if engine.in_checkmate():
            text = f"Game over, {color} is in checkmate."
        elif engine.in_draw():
            text = "Game over, drawn position"
        elif engine.in_check():
            text += f", {color} is in check"
        return StatusView(text=text, fen=engine.fen(), pgn=engine.pgn())

    def _publish_status(self) -> None:
        self.notifier.set_status(self.status())

    def _sync_board(self, animate: bool = True) -> None:
        if self.engine is not None:
            self.board.set_position(self.engine.fen(), animate=animate)

    # ------------------------------------------------------------------
    # Move handling
    # ------------------------------------------------------------------

    @property
    def accepts_moves(self) -> bool:
        return (
            self.engine is not None
            and self.session.phase == SessionPhase.AWAITING_MOVE
            and self.session.pending_promotion is None
            and not self.engine.is_game_over()
        )

    def on_drop(self, source: str, target: str) -> MoveOutcome:
        """A piece was dropped on the board."""
        if not self.accepts_moves:
            self._sync_board(animate=False)
            return MoveOutcome.IGNORED

        record = self.engine.move(source, target, promotion="q")
        if record is None:
            return MoveOutcome.SNAPBACK

        if record.is_promotion:
            self.engine.undo()
            self.session.pending_promotion = PendingPromotion(
                source=record.source, target=record.target, color=record.color
            )
            self._sync_board(animate=False)
            return MoveOutcome.PROMOTION_PENDING

        return self.handle_move(record)

    def promote(self, piece: str) -> MoveOutcome:
        """Finish a pending promotion with the chosen piece."""
        pending = self.session.pending_promotion
        if pending is None or self.engine is None:
            return MoveOutcome.IGNORED
        self.session.pending_promotion = None

        record = self.engine.move(pending.source, pending.target, promotion=piece)
        if record is None:
            self._sync_board(animate=False)
            return MoveOutcome.SNAPBACK
        outcome = self.handle_move(record)
        self._sync_board()
        return outcome

    def cancel_promotion(self) -> None:
        self.session.pending_promotion = None
        self._sync_board(animate=False)

    def handle_move(self, record: MoveRecord) -> MoveOutcome:
        """Judge a move the engine has already applied."""
        puzzle = self.active_puzzle
        if puzzle is None:
            return MoveOutcome.IGNORED

        self.sounds.play("capture" if record.captured else "move")
        self._sync_board(animate=False)

        if puzzle.uses_line:
            outcome = self._handle_line_move(puzzle, record)
        else:
            outcome = self._handle_solution_move(puzzle, record)
        self._publish_status()
        return outcome

    def _handle_line_move(self, puzzle: Puzzle, record: MoveRecord) -> MoveOutcome:
        line = puzzle.line or []
        expected = line[self.session.line_step] if self.session.line_step < len(line) else None

        if record.san != expected:
            self._reject(puzzle)
            return MoveOutcome.INCORRECT

        self.session.line_step += 1

        # Exactly one scripted reply per player move
        if self.session.line_step < len(line):
            reply_san = line[self.session.line_step]
            if self.engine.move_san(reply_san) is None:
                logger.warning("Scripted reply %r is not legal in puzzle #%s", reply_san, puzzle.id)
            self._sync_board()
            self.session.line_step += 1

        if self.session.line_step >= len(line):
            self._solve(puzzle)
            return MoveOutcome.SOLVED
        return MoveOutcome.CONTINUE

    def _handle_solution_move(self, puzzle: Puzzle, record: MoveRecord) -> MoveOutcome:
        if record.san in puzzle.solution:
            self._solve(puzzle)
            return MoveOutcome.SOLVED
        self._reject(puzzle)
        return MoveOutcome.INCORRECT

    def _reject(self, puzzle: Puzzle) -> None:
        self.tracker.record_attempt(self.tracker.current_player, puzzle.id, False)
        self.sounds.play("wrong")
        self.engine.undo()
        self._sync_board()

    def _solve(self, puzzle: Puzzle) -> None:
        self.tracker.record_attempt(self.tracker.current_player, puzzle.id, True)
        self.sounds.play("correct")
        self.session.phase = SessionPhase.SOLVED
        self.cancel_pending_advance()
        self._advance_task = self.scheduler.call_later(self.advance_delay_s, self._advance)

    def _advance(self) -> None:
        self._advance_task = None
        if self.session.active_index + 1 < len(self.puzzles):
            self.load_puzzle(self.session.active_index + 1)
            return
        self.session.phase = SessionPhase.ALL_SOLVED
        self.sounds.play("alldone")
        self.notifier.notify(ALL_DONE_MESSAGE)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def dispatch(self, event: TrainerEvent) -> Optional[MoveOutcome]:
        if isinstance(event, MoveDropped):
            return self.on_drop(event.source, event.target)
        if isinstance(event, PromotionChosen):
            return self.promote(event.piece)
        if isinstance(event, PromotionCancelled):
            self.cancel_promotion()
        elif isinstance(event, NextRequested):
            self.next_puzzle()
        elif isinstance(event, PreviousRequested):
            self.previous_puzzle()
        elif isinstance(event, PuzzleRequested):
            if 0 <= event.index < len(self.puzzles):
                self.load_puzzle(event.index)
        else:
            raise TypeError(f"Unknown event: {event!r}")
        return None
