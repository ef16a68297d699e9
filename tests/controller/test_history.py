"""Unit tests for controller/history.py"""

import random

import chess
import pytest

from controller.exceptions import HistoryDesync, NoHistory, NoRedo
from controller.history import HistoryManager
from controller.rules import ChessRulesEngine

sq = chess.parse_square
E2E4 = chess.Move.from_uci("e2e4")


def apply(rules: ChessRulesEngine, history: HistoryManager, uci: str) -> chess.Move:
    move = chess.Move.from_uci(uci)
    applied = rules.try_move(move.from_square, move.to_square, move.promotion)
    assert applied is not None, uci
    history.record(applied)
    return applied


def random_line(rules: ChessRulesEngine, history: HistoryManager, seed: int, length: int) -> list[str]:
    """Play up to `length` random legal moves; return the FEN after each one."""
    rng = random.Random(seed)
    fens = [rules.position()]
    for _ in range(length):
        moves = rules.legal_moves()
        if not moves:
            break
        apply(rules, history, rng.choice(moves).uci())
        fens.append(rules.position())
    return fens


# --- SCENARIO ----
def test_e2e4_undo_redo(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    assert history.done == (E2E4,)
    assert rules.turn() == chess.BLACK
    after_e4 = rules.position()

    assert history.undo() == E2E4
    assert rules.position() == chess.STARTING_FEN
    assert history.done == ()
    assert history.undone == (E2E4,)

    assert history.redo() == E2E4
    assert rules.position() == after_e4
    assert history.done == (E2E4,)
    assert history.undone == ()


# --- ERRORS ----
def test_undo_with_empty_history_raises(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    assert not history.can_undo
    with pytest.raises(NoHistory):
        history.undo()


def test_redo_with_nothing_undone_raises(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    assert not history.can_redo
    with pytest.raises(NoRedo):
        history.redo()


def test_undo_detects_engine_without_moves(rules: ChessRulesEngine) -> None:
    """Popping the engine behind the history's back breaks the lockstep."""
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    rules.board.pop()
    with pytest.raises(HistoryDesync):
        history.undo()


def test_undo_detects_different_engine_move(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    rules.try_move(sq("e7"), sq("e5"))  # applied but never recorded
    with pytest.raises(HistoryDesync):
        history.undo()


def test_redo_detects_rejected_move(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    history.undo()
    rules.try_move(sq("d2"), sq("d4"))  # now Black to move; e2e4 is illegal
    with pytest.raises(HistoryDesync):
        history.redo()


# --- INVALIDATION / RESET ----
def test_record_clears_redo_history(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    apply(rules, history, "e7e5")
    history.undo()
    assert history.can_redo

    apply(rules, history, "c7c5")
    assert history.undone == ()
    assert [m.uci() for m in history.done] == ["e2e4", "c7c5"]


def test_reset_clears_stacks_but_not_engine(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    apply(rules, history, "e2e4")
    apply(rules, history, "e7e5")
    history.undo()
    position = rules.position()

    history.reset()

    assert history.done == ()
    assert history.undone == ()
    assert rules.position() == position


def test_redo_replays_promotion_choice() -> None:
    rules = ChessRulesEngine("8/P7/8/8/8/8/8/k6K w - - 0 1")
    history = HistoryManager(rules)
    apply(rules, history, "a7a8n")
    history.undo()
    assert history.redo().promotion == chess.KNIGHT
    assert rules.piece_at(sq("a8")) == chess.Piece(chess.KNIGHT, chess.WHITE)


# --- PROPERTIES ----
@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_full_undo_returns_to_start(rules: ChessRulesEngine, seed: int) -> None:
    history = HistoryManager(rules)
    fens = random_line(rules, history, seed, 30)

    for _ in range(len(fens) - 1):
        history.undo()

    assert rules.position() == chess.STARTING_FEN
    assert history.done == ()


@pytest.mark.parametrize("k", [1, 5, 12, 20])
def test_undo_then_redo_k_times_reproduces_position(rules: ChessRulesEngine, k: int) -> None:
    history = HistoryManager(rules)
    fens = random_line(rules, history, 42, 20)
    n = len(fens) - 1
    k = min(k, n)

    for _ in range(k):
        history.undo()
    assert rules.position() == fens[n - k]
    for _ in range(k):
        history.redo()

    assert rules.position() == fens[n]
    assert history.undone == ()


def test_done_replays_to_engine_position(rules: ChessRulesEngine) -> None:
    history = HistoryManager(rules)
    random_line(rules, history, 9, 25)
    history.undo()
    history.undo()
    history.redo()

    replay = chess.Board()
    for move in history.done:
        replay.push(move)
    assert replay.fen() == rules.position()
