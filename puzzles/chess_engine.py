"""python-chess implementation of the RulesEngine contract."""

from __future__ import annotations

from typing import List, Optional

import chess

from puzzles.interfaces import MoveRecord

PROMOTION_PIECES = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


class ChessRulesEngine:
    """
    A game started from a puzzle FEN.

    Raises ValueError (from python-chess) for an unparsable FEN.
    """

    def __init__(self, fen: str):
        self._board = chess.Board(fen)
        self._initial_fen = self._board.fen()
        self._history: List[MoveRecord] = []

    def _push(self, move: chess.Move) -> MoveRecord:
        board = self._board
        record = MoveRecord(
            san=board.san(move),
            uci=move.uci(),
            source=chess.square_name(move.from_square),
            target=chess.square_name(move.to_square),
            color="w" if board.turn == chess.WHITE else "b",
            captured=board.is_capture(move),
            promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
        )
        board.push(move)
        self._history.append(record)
        return record

    def move(self, source: str, target: str, promotion: str = "q") -> Optional[MoveRecord]:
        """Play a from/to move; the promotion piece only applies to pawns reaching the last rank."""
        try:
            from_sq = chess.parse_square(source)
            to_sq = chess.parse_square(target)
        except ValueError:
            return None

        piece = self._board.piece_at(from_sq)
        promo = None
        if piece and piece.piece_type == chess.PAWN and chess.square_rank(to_sq) in (0, 7):
            promo = PROMOTION_PIECES.get((promotion or "q").lower())
            if promo is None:
                return None

        move = chess.Move(from_sq, to_sq, promotion=promo)
        if move not in self._board.legal_moves:
            return None
        return self._push(move)

    def move_san(self, san: str) -> Optional[MoveRecord]:
        try:
            move = self._board.parse_san(san)
        except ValueError:
            return None
        return self._push(move)

    def undo(self) -> Optional[MoveRecord]:
        if not self._board.move_stack:
            return None
        self._board.pop()
        return self._history.pop()

    def turn(self) -> str:
        return "w" if self._board.turn == chess.WHITE else "b"

    def is_game_over(self) -> bool:
        return self._board.is_game_over(claim_draw=True)

    def in_check(self) -> bool:
        return self._board.is_check()

    def in_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def in_draw(self) -> bool:
        outcome = self._board.outcome(claim_draw=True)
        return outcome is not None and outcome.winner is None

    def fen(self) -> str:
        return self._board.fen()

    def pgn(self) -> str:
        if not self._board.move_stack:
            return ""
        return chess.Board(self._initial_fen).variation_san(self._board.move_stack)

    def history(self) -> List[MoveRecord]:
        return list(self._history)
