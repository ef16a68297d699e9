"""
Selection tracking: turns a stream of square activations into move attempts.

The first activation on a piece of the side to move arms that square. The
next activation, wherever it lands, is a move attempt from the armed square.
Whether the attempt succeeds or not, the selection is dropped afterwards; an
illegal destination holding a friendly piece is not re-armed, the player has
to activate it again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import chess

from controller.rules import RulesEngine

_log = logging.getLogger(__name__)


class ActivationKind(Enum):
    IGNORED = "ignored"
    ARMED = "armed"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Activation:
    """
    Outcome of one activation.

    Fields:
        kind:       What the activation did.
        square:     The activated square.
        highlights: Candidate destinations to highlight (ARMED only).
        move:       The applied move (COMMITTED only).
    """

    kind: ActivationKind
    square: int
    highlights: tuple[int, ...] = field(default=())
    move: chess.Move | None = None


class SelectionTracker:
    def __init__(self, rules: RulesEngine) -> None:
        self.rules = rules
        self.armed: int | None = None

    def activate(self, square: int) -> Activation:
        if self.armed is None:
            return self._arm(square)

        origin = self.armed
        self.armed = None
        move = self.rules.try_move(origin, square)
        if move is None:
            _log.debug("Selection aborted: %s -> %s is illegal", origin, square)
            return Activation(ActivationKind.ABORTED, square)
        return Activation(ActivationKind.COMMITTED, square, move=move)

    def clear(self) -> None:
        self.armed = None

    def _arm(self, square: int) -> Activation:
        piece = self.rules.piece_at(square)
        if piece is None or piece.color != self.rules.turn():
            return Activation(ActivationKind.IGNORED, square)
        self.armed = square
        return Activation(
            ActivationKind.ARMED,
            square,
            highlights=tuple(self.rules.legal_moves_from(square)),
        )
