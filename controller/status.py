"""
Game status derivation.

The status is never stored: it is computed from the rules engine whenever a
move is applied or taken back, so undo can move a finished game back to
"in progress" without any extra bookkeeping.
"""

from dataclasses import dataclass
from enum import Enum

import chess

from controller.rules import RulesEngine


class GamePhase(Enum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.CHECKMATE, GamePhase.STALEMATE, GamePhase.DRAW)


@dataclass(frozen=True)
class GameStatus:
    """
    Fields:
        phase:  Derived phase of the game.
        turn:   Side to move.
        winner: Side that delivered mate; None unless phase is CHECKMATE.
    """

    phase: GamePhase
    turn: chess.Color
    winner: chess.Color | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def text(self) -> str:
        side = side_name(self.turn)
        if self.phase is GamePhase.CHECKMATE:
            return f"Checkmate! {side_name(self.winner)} wins"
        if self.phase is GamePhase.STALEMATE:
            return "Stalemate! The game is a draw"
        if self.phase is GamePhase.DRAW:
            return "Draw!"
        if self.phase is GamePhase.CHECK:
            return f"{side} to move, in check"
        return f"{side} to move"


def side_name(color: chess.Color | None) -> str:
    if color is None:
        return "Nobody"
    return chess.COLOR_NAMES[color].capitalize()


def derive_status(rules: RulesEngine) -> GameStatus:
    """Read the current phase off the engine. Checkmate wins over every other state."""
    turn = rules.turn()
    if rules.in_checkmate():
        return GameStatus(GamePhase.CHECKMATE, turn, winner=not turn)
    if rules.in_stalemate():
        return GameStatus(GamePhase.STALEMATE, turn)
    if rules.in_draw():
        return GameStatus(GamePhase.DRAW, turn)
    if rules.in_check():
        return GameStatus(GamePhase.CHECK, turn)
    return GameStatus(GamePhase.IN_PROGRESS, turn)
