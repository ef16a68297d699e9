"""
Rules engine interface and its python-chess implementation.

The controller never decides legality itself. Everything about the position
(whose turn it is, which moves are legal, whether the game is over) is asked
of a RulesEngine. ChessRulesEngine is the production implementation and is a
thin adapter over chess.Board: python-chess handles castling, en passant,
promotion, check detection and repetition bookkeeping as moves are pushed.

Squares are python-chess square indices (a1 = 0 ... h8 = 63). Any integer is
accepted; values off the board are simply treated as empty and illegal.
"""

from abc import ABC, abstractmethod

import chess


class RulesEngine(ABC):
    """
    The narrow surface of a rules engine consumed by the controller.

    Implementations own the authoritative position and a single-step undo.
    They are never asked to remember anything beyond their own move stack.
    """

    @abstractmethod
    def turn(self) -> chess.Color:
        """Side to move."""

    @abstractmethod
    def piece_at(self, square: int) -> chess.Piece | None:
        """Piece on the square, or None for empty or off-board squares."""

    @abstractmethod
    def legal_moves_from(self, square: int) -> list[int]:
        """Destination squares of every legal move starting on the square."""

    @abstractmethod
    def legal_moves(self) -> list[chess.Move]:
        """All legal moves for the side to move."""

    @abstractmethod
    def try_move(
        self,
        from_square: int,
        to_square: int,
        promotion: chess.PieceType | None = None,
    ) -> chess.Move | None:
        """Apply the move if legal and return it; return None otherwise."""

    @abstractmethod
    def undo(self) -> chess.Move | None:
        """Take back the last applied move, or return None if there is none."""

    @abstractmethod
    def in_check(self) -> bool: ...

    @abstractmethod
    def in_checkmate(self) -> bool: ...

    @abstractmethod
    def in_stalemate(self) -> bool: ...

    @abstractmethod
    def in_draw(self) -> bool: ...

    @abstractmethod
    def reset(self) -> None:
        """Return to the starting position with an empty move stack."""

    @abstractmethod
    def position(self) -> str:
        """Current position as a FEN string."""

    @abstractmethod
    def san_history(self) -> list[str]:
        """Moves played since the starting position, in SAN."""


def _on_board(square: int) -> bool:
    return isinstance(square, int) and 0 <= square < 64


class ChessRulesEngine(RulesEngine):
    """
    RulesEngine backed by a python-chess Board.

    Attributes:
        board: The live position. Callers outside the controller should treat
               it as read-only; mutating it directly breaks the history
               lockstep.
    """

    def __init__(self, fen: str = chess.STARTING_FEN) -> None:
        self._starting_fen = fen
        self.board: chess.Board = chess.Board(fen)

    def turn(self) -> chess.Color:
        return self.board.turn

    def piece_at(self, square: int) -> chess.Piece | None:
        if not _on_board(square):
            return None
        return self.board.piece_at(square)

    def legal_moves_from(self, square: int) -> list[int]:
        if not _on_board(square):
            return []
        # A promotion produces four moves to the same square; report it once.
        destinations: list[int] = []
        for move in self.board.generate_legal_moves(from_mask=chess.BB_SQUARES[square]):
            if move.to_square not in destinations:
                destinations.append(move.to_square)
        return destinations

    def legal_moves(self) -> list[chess.Move]:
        return list(self.board.legal_moves)

    def try_move(
        self,
        from_square: int,
        to_square: int,
        promotion: chess.PieceType | None = None,
    ) -> chess.Move | None:
        if not (_on_board(from_square) and _on_board(to_square)):
            return None
        if from_square == to_square:
            return None

        if promotion is None and self._is_promotion(from_square, to_square):
            promotion = chess.QUEEN

        move = chess.Move(from_square, to_square, promotion=promotion)
        if not self.board.is_legal(move):
            return None
        self.board.push(move)
        return move

    def undo(self) -> chess.Move | None:
        if not self.board.move_stack:
            return None
        return self.board.pop()

    def in_check(self) -> bool:
        return self.board.is_check()

    def in_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def in_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def in_draw(self) -> bool:
        board = self.board
        return (
            board.is_insufficient_material()
            or board.is_seventyfive_moves()
            or board.is_fivefold_repetition()
            or board.is_repetition(3)
            or board.is_fifty_moves()
        )

    def reset(self) -> None:
        self.board = chess.Board(self._starting_fen)

    def position(self) -> str:
        return self.board.fen()

    def san_history(self) -> list[str]:
        replay = self.board.root()
        sans: list[str] = []
        for move in self.board.move_stack:
            sans.append(replay.san(move))
            replay.push(move)
        return sans

    def _is_promotion(self, from_square: int, to_square: int) -> bool:
        piece = self.board.piece_at(from_square)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        last_rank = 7 if piece.color == chess.WHITE else 0
        return chess.square_rank(to_square) == last_rank
