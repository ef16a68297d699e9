"""Unit tests for controller/rules.py"""

import chess
import pytest

from controller.rules import ChessRulesEngine

sq = chess.parse_square

PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
BARE_KINGS_FEN = "8/8/8/8/8/8/8/k6K w - - 0 1"


def play(rules: ChessRulesEngine, *moves: str) -> None:
    for uci in moves:
        move = chess.Move.from_uci(uci)
        assert rules.try_move(move.from_square, move.to_square, move.promotion) is not None, uci


# --- QUERIES ----
def test_start_position(rules: ChessRulesEngine) -> None:
    """White moves first and the e2 pawn is where it should be."""
    assert rules.turn() == chess.WHITE
    assert rules.piece_at(sq("e2")) == chess.Piece(chess.PAWN, chess.WHITE)
    assert rules.piece_at(sq("e4")) is None
    assert rules.position() == chess.STARTING_FEN


@pytest.mark.parametrize("square", [-1, 64, 1000])
def test_off_board_squares_are_empty(rules: ChessRulesEngine, square: int) -> None:
    """Out-of-range squares never hold pieces and never have moves."""
    assert rules.piece_at(square) is None
    assert rules.legal_moves_from(square) == []


def test_legal_moves_from_pawn(rules: ChessRulesEngine) -> None:
    assert sorted(rules.legal_moves_from(sq("e2"))) == [sq("e3"), sq("e4")]
    assert sorted(rules.legal_moves_from(sq("g1"))) == [sq("f3"), sq("h3")]


def test_legal_moves_from_reports_promotion_square_once() -> None:
    """Four promotion choices share a destination; it is highlighted once."""
    rules = ChessRulesEngine(PROMOTION_FEN)
    assert rules.legal_moves_from(sq("a7")) == [sq("a8")]


def test_legal_moves_counts_all_moves(rules: ChessRulesEngine) -> None:
    assert len(rules.legal_moves()) == 20


# --- MOVES ----
def test_try_move_applies_legal_move(rules: ChessRulesEngine) -> None:
    move = rules.try_move(sq("e2"), sq("e4"))
    assert move == chess.Move.from_uci("e2e4")
    assert rules.turn() == chess.BLACK
    assert rules.piece_at(sq("e4")) == chess.Piece(chess.PAWN, chess.WHITE)


@pytest.mark.parametrize(
    "from_square, to_square",
    [
        (sq("e2"), sq("e5")),  # too far
        (sq("e7"), sq("e5")),  # wrong side
        (sq("e2"), sq("e2")),  # same square
        (sq("e3"), sq("e4")),  # empty origin
        (-5, sq("e4")),
        (sq("e2"), 99),
    ],
)
def test_try_move_rejects_illegal_input(rules: ChessRulesEngine, from_square: int, to_square: int) -> None:
    """Illegal or out-of-range input returns None and leaves the position alone."""
    assert rules.try_move(from_square, to_square) is None
    assert rules.position() == chess.STARTING_FEN


def test_try_move_auto_queens() -> None:
    rules = ChessRulesEngine(PROMOTION_FEN)
    move = rules.try_move(sq("a7"), sq("a8"))
    assert move is not None
    assert move.promotion == chess.QUEEN
    assert rules.piece_at(sq("a8")) == chess.Piece(chess.QUEEN, chess.WHITE)


def test_try_move_keeps_explicit_underpromotion() -> None:
    rules = ChessRulesEngine(PROMOTION_FEN)
    move = rules.try_move(sq("a7"), sq("a8"), chess.KNIGHT)
    assert move is not None
    assert move.promotion == chess.KNIGHT


def test_undo(rules: ChessRulesEngine) -> None:
    assert rules.undo() is None
    play(rules, "e2e4")
    assert rules.undo() == chess.Move.from_uci("e2e4")
    assert rules.position() == chess.STARTING_FEN
    assert rules.undo() is None


def test_reset_returns_to_starting_position() -> None:
    rules = ChessRulesEngine(PROMOTION_FEN)
    play(rules, "a7a8q")
    rules.reset()
    assert rules.position() == PROMOTION_FEN
    assert rules.undo() is None


def test_san_history(rules: ChessRulesEngine) -> None:
    play(rules, "e2e4", "e7e5", "g1f3")
    assert rules.san_history() == ["e4", "e5", "Nf3"]


# --- GAME STATE ----
def test_fools_mate_is_checkmate(rules: ChessRulesEngine) -> None:
    play(rules, "f2f3", "e7e5", "g2g4", "d8h4")
    assert rules.in_check()
    assert rules.in_checkmate()
    assert not rules.in_stalemate()


def test_check_without_mate(rules: ChessRulesEngine) -> None:
    play(rules, "e2e4", "f7f6", "d1h5")
    assert rules.in_check()
    assert not rules.in_checkmate()


def test_stalemate() -> None:
    rules = ChessRulesEngine(STALEMATE_FEN)
    assert rules.in_stalemate()
    assert not rules.in_check()
    assert rules.legal_moves() == []


def test_insufficient_material_is_a_draw() -> None:
    rules = ChessRulesEngine(BARE_KINGS_FEN)
    assert rules.in_draw()
    assert not rules.in_stalemate()


def test_start_position_is_not_a_draw(rules: ChessRulesEngine) -> None:
    assert not rules.in_draw()


def test_repetition_draws_only_once_it_has_happened(rules: ChessRulesEngine) -> None:
    for uci in ("g1f3", "g8f6", "f3g1", "f6g8", "g1f3", "g8f6", "f3g1"):
        move = chess.Move.from_uci(uci)
        rules.try_move(move.from_square, move.to_square)
    assert not rules.in_draw()

    rules.try_move(chess.F6, chess.G8)
    assert rules.in_draw()
