"""
Linear, reversible move history kept in lockstep with the rules engine.

Two stacks: `done` holds every move applied since the last reset, in order;
`undone` holds the moves taken back by undo, most recent last. Replaying
`done` from the starting position always reproduces the engine's position.
Any mismatch between the two is reported as HistoryDesync and never repaired
silently.
"""

import logging

import chess

from controller.exceptions import HistoryDesync, NoHistory, NoRedo
from controller.rules import RulesEngine

_log = logging.getLogger(__name__)


class HistoryManager:
    """
    Undo/redo stacks over a RulesEngine.

    Attributes:
        rules: The engine whose position the stacks describe.
    """

    def __init__(self, rules: RulesEngine) -> None:
        self.rules = rules
        self._done: list[chess.Move] = []
        self._undone: list[chess.Move] = []

    @property
    def done(self) -> tuple[chess.Move, ...]:
        return tuple(self._done)

    @property
    def undone(self) -> tuple[chess.Move, ...]:
        return tuple(self._undone)

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def record(self, move: chess.Move) -> None:
        """Record a move the engine has just applied. Invalidates redo history."""
        self._done.append(move)
        if self._undone:
            _log.debug("Discarding %d redoable move(s)", len(self._undone))
        self._undone.clear()

    def undo(self) -> chess.Move:
        """
        Take back the last move in both the history and the engine.

        Raises:
            NoHistory: Nothing has been played.
            HistoryDesync: The engine had nothing to undo, or undid a
                           different move than the one on top of `done`.
        """
        if not self._done:
            raise NoHistory("No move to undo")

        move = self._done.pop()
        reverted = self.rules.undo()
        if reverted != move:
            raise HistoryDesync(f"Undo of {move.uci()} reverted {_describe(reverted)} in the rules engine")

        self._undone.append(move)
        return move

    def redo(self) -> chess.Move:
        """
        Re-apply the most recently undone move.

        Raises:
            NoRedo: Nothing has been undone since the last forward move.
            HistoryDesync: The engine refused the recorded move.
        """
        if not self._undone:
            raise NoRedo("No move to redo")

        move = self._undone.pop()
        replayed = self.rules.try_move(move.from_square, move.to_square, move.promotion)
        if replayed != move:
            raise HistoryDesync(f"Redo of {move.uci()} applied {_describe(replayed)} in the rules engine")

        self._done.append(move)
        return move

    def reset(self) -> None:
        """Forget both stacks. The caller resets the engine."""
        self._done.clear()
        self._undone.clear()


def _describe(move: chess.Move | None) -> str:
    return "nothing" if move is None else move.uci()
