"""Tests for the python-chess backed rules engine."""

import unittest

from puzzles.chess_engine import ChessRulesEngine

from tests.conftest import PROMOTION_FEN, QXF7_FEN, START_FEN


class TestMoves(unittest.TestCase):

    def test_legal_move_returns_record(self):
        engine = ChessRulesEngine(START_FEN)
        record = engine.move("g1", "f3")
        self.assertEqual(record.san, "Nf3")
        self.assertEqual(record.uci, "g1f3")
        self.assertEqual(record.color, "w")
        self.assertFalse(record.captured)
        self.assertEqual(engine.turn(), "b")

    def test_illegal_move_returns_none(self):
        engine = ChessRulesEngine(START_FEN)
        self.assertIsNone(engine.move("e2", "e5"))
        self.assertIsNone(engine.move("z9", "e4"))
        self.assertEqual(engine.fen(), START_FEN)

    def test_capture_is_flagged(self):
        engine = ChessRulesEngine(QXF7_FEN)
        record = engine.move("h5", "f7")
        self.assertTrue(record.captured)
        self.assertEqual(record.san, "Qxf7+")
        self.assertTrue(engine.in_check())
        self.assertFalse(engine.in_checkmate())

    def test_promotion_piece_is_applied(self):
        engine = ChessRulesEngine(PROMOTION_FEN)
        record = engine.move("a7", "a8", promotion="n")
        self.assertTrue(record.is_promotion)
        self.assertEqual(record.promotion, "n")
        self.assertEqual(record.san, "a8=N")

    def test_promotion_defaults_to_queen(self):
        engine = ChessRulesEngine(PROMOTION_FEN)
        self.assertEqual(engine.move("a7", "a8").san, "a8=Q")

    def test_promotion_argument_ignored_for_other_moves(self):
        engine = ChessRulesEngine(START_FEN)
        record = engine.move("e2", "e4", promotion="n")
        self.assertFalse(record.is_promotion)

    def test_san_moves(self):
        engine = ChessRulesEngine(START_FEN)
        self.assertEqual(engine.move_san("e4").uci, "e2e4")
        self.assertIsNone(engine.move_san("Qh4"))
        self.assertIsNone(engine.move_san("garbage"))

    def test_undo_restores_position(self):
        engine = ChessRulesEngine(START_FEN)
        engine.move("e2", "e4")
        self.assertEqual(engine.undo().san, "e4")
        self.assertEqual(engine.fen(), START_FEN)
        self.assertIsNone(engine.undo())
        self.assertEqual(engine.history(), [])


class TestGameState(unittest.TestCase):

    def test_invalid_fen_raises(self):
        with self.assertRaises(ValueError):
            ChessRulesEngine("not a fen")

    def test_pgn_numbers_from_the_start_position(self):
        engine = ChessRulesEngine(START_FEN)
        self.assertEqual(engine.pgn(), "")
        engine.move_san("e4")
        engine.move_san("e5")
        engine.move_san("Nf3")
        self.assertEqual(engine.pgn(), "1. e4 e5 2. Nf3")

    def test_checkmate(self):
        engine = ChessRulesEngine("r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 4 4")
        engine.move_san("Qxf7#")
        self.assertTrue(engine.in_checkmate())
        self.assertTrue(engine.is_game_over())
        self.assertFalse(engine.in_draw())

    def test_claimable_repetition_ends_the_game(self):
        engine = ChessRulesEngine(START_FEN)
        for san in ("Nf3", "Nf6", "Ng1", "Ng8", "Nf3", "Nf6", "Ng1", "Ng8"):
            engine.move_san(san)
        self.assertTrue(engine.in_draw())
        self.assertTrue(engine.is_game_over())

    def test_stalemate_is_a_draw(self):
        engine = ChessRulesEngine("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        self.assertTrue(engine.in_draw())
        self.assertFalse(engine.in_checkmate())


if __name__ == "__main__":
    unittest.main()
