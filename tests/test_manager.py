"""Tests for puzzle set authoring (add / update / delete / export)."""

import json

import pytest

from puzzles.events import MoveOutcome
from puzzles.importer import parse_puzzle_file
from puzzles.manager import PuzzleSetManager, split_solution
from puzzles.puzzle_types import Puzzle, SessionPhase

from tests.conftest import QXF7_FEN, START_FEN


def yes(_message):
    return True


def no(_message):
    return False


@pytest.fixture
def make_manager(make_controller, storage):
    def _make(puzzles):
        controller = make_controller(puzzles)
        return PuzzleSetManager(controller, storage)

    return _make


def three_puzzles():
    return [
        Puzzle(id=1, fen=START_FEN, solution=["e4"]),
        Puzzle(id=2, fen=QXF7_FEN, solution=["Qxf7+"]),
        Puzzle(id=5, fen=START_FEN, solution=["d4"], line=["d4", "d5", "c4"]),
    ]


def test_split_solution():
    assert split_solution(" Qxf7+, Qxf7 ,,") == ["Qxf7+", "Qxf7"]
    assert split_solution("") == []


def test_add_assigns_next_id_and_persists(make_manager, storage):
    manager = make_manager(three_puzzles())

    result = manager.add(f" {QXF7_FEN} ", "Qxf7+, Qxf7")

    assert result.ok
    assert result.message == "Puzzle added"
    added = manager.puzzles[-1]
    assert added.id == 6
    assert added.fen == QXF7_FEN
    assert added.solution == ["Qxf7+", "Qxf7"]
    assert storage.load_puzzles()[-1] == added


def test_add_requires_fen_and_solution(make_manager, storage):
    manager = make_manager(three_puzzles())
    for fen, solution in (("", "e4"), (START_FEN, " , "), ("  ", "")):
        result = manager.add(fen, solution)
        assert not result.ok
        assert result.message == "Enter a FEN and a solution"
    assert len(manager.puzzles) == 3
    assert storage.load_puzzles() is None


def test_add_to_empty_set_loads_it(make_manager):
    manager = make_manager([])
    manager.add(START_FEN, "e4")
    assert manager.puzzles[0].id == 1
    assert manager.controller.session.phase == SessionPhase.AWAITING_MOVE
    assert manager.controller.active_puzzle.id == 1


def test_update_rewrites_fen_and_solution_in_place(make_manager):
    manager = make_manager(three_puzzles())

    result = manager.update("5", QXF7_FEN, "Qxf7+")

    assert result.ok
    assert result.message == "Puzzle saved"
    puzzle = manager.puzzles[2]
    assert (puzzle.id, puzzle.fen, puzzle.solution) == (5, QXF7_FEN, ["Qxf7+"])
    assert puzzle.line == ["d4", "d5", "c4"]


def test_update_active_puzzle_reloads_it(make_manager):
    manager = make_manager(three_puzzles())
    manager.controller.on_drop("d2", "d4")

    manager.update(1, QXF7_FEN, "Qxf7+")

    assert manager.controller.engine.fen() == QXF7_FEN
    assert manager.controller.board.fen == QXF7_FEN


def test_update_errors(make_manager):
    manager = make_manager(three_puzzles())
    assert manager.update("", START_FEN, "e4").message == "Enter an ID, a FEN and a solution"
    assert manager.update("abc", START_FEN, "e4").message == "Enter an ID, a FEN and a solution"
    assert manager.update(3, START_FEN, "e4").message == "Unknown puzzle ID"


def test_delete_asks_first(make_manager):
    manager = make_manager(three_puzzles())
    result = manager.delete(2, no)
    assert not result.ok
    assert result.message == "Delete cancelled"
    assert len(manager.puzzles) == 3


def test_delete_active_last_puzzle_clamps_index(make_manager, storage):
    manager = make_manager(three_puzzles())
    manager.controller.load_puzzle(2)

    result = manager.delete(5, yes)

    assert result.message == "Puzzle deleted"
    assert [p.id for p in manager.puzzles] == [1, 2]
    assert manager.controller.session.active_index == 1
    assert manager.controller.active_puzzle.id == 2
    assert [p.id for p in storage.load_puzzles()] == [1, 2]


def test_delete_only_puzzle_clears_display(make_manager):
    manager = make_manager([Puzzle(id=1, fen=START_FEN, solution=["e4"])])

    manager.delete("1", yes)

    assert manager.puzzles == []
    assert manager.controller.engine is None
    assert manager.controller.active_puzzle is None
    assert manager.controller.notifier.status.text == "No puzzles"


def test_delete_cancels_pending_advance(make_manager, clock):
    manager = make_manager(three_puzzles())
    manager.controller.load_puzzle(1)
    manager.controller.on_drop("h5", "f7")
    assert manager.controller.advance_pending

    manager.delete(1, yes)
    clock.advance(5)

    assert manager.controller.scheduler.run_due() == 0
    assert manager.controller.active_puzzle.id == 5


def test_form_values(make_manager):
    manager = make_manager(three_puzzles())
    assert manager.form_values(2) == {"id": 2, "fen": QXF7_FEN, "solution": "Qxf7+"}
    assert manager.form_values(9) is None


def test_export_reimports_to_the_same_set(make_manager):
    manager = make_manager(three_puzzles())
    exported = manager.export()

    assert json.loads(exported)[2]["line"] == ["d4", "d5", "c4"]
    assert "line" not in json.loads(exported)[0]
    assert parse_puzzle_file(exported) == three_puzzles()


def test_add_rejects_position_the_engine_cannot_load(make_manager, storage):
    manager = make_manager(three_puzzles())

    result = manager.add("garbage fen", "Qxf7+")

    assert not result.ok
    assert result.message == "Invalid FEN"
    assert [p.id for p in manager.puzzles] == [1, 2, 5]
    assert storage.load_puzzles() is None


def test_update_with_bad_fen_leaves_active_puzzle_untouched(make_manager, storage, tracker):
    manager = make_manager(three_puzzles())

    result = manager.update(1, "garbage fen", "Qxf7+")

    assert not result.ok
    assert result.message == "Invalid FEN"
    assert manager.puzzles[0] == Puzzle(id=1, fen=START_FEN, solution=["e4"])
    assert storage.load_puzzles() is None
    assert manager.controller.on_drop("e2", "e4") == MoveOutcome.SOLVED
    assert tracker.record_for("Tester").overall.wrong == 0
