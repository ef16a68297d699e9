"""
Turn scheduling for the automated opponent.

After every recorded move the scheduler decides whether the automated side
is now to move and, if so, arms a single delayed reply. The reply picks a
legal move uniformly at random, applies it and records it.

Threading model:
    Delays are real threading.Timer objects by default, so replies fire on a
    timer thread. Every scheduled call carries a private token; when the
    timer fires, the token is re-checked under the shared lock and a call
    that was canceled (or replaced) in the meantime does nothing. At most
    one reply is ever pending: scheduling always cancels first.
"""

import logging
import random
import threading
from contextlib import AbstractContextManager
from enum import Enum
from typing import Callable, Protocol

import chess

from controller.constants import REPLY_DELAY_SECONDS
from controller.history import HistoryManager
from controller.rules import RulesEngine
from controller.status import derive_status

_log = logging.getLogger(__name__)


class Cancelable(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Cancelable]


def start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Default timer factory: a started daemon threading.Timer."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class PendingCall:
    """
    A single cancelable deferred callback.

    Scheduling a new call cancels the previous one, so two live timers never
    coexist. Callbacks run while holding the lock.
    """

    def __init__(self, lock: AbstractContextManager | None = None, timer_factory: TimerFactory = start_timer) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._timer_factory = timer_factory
        self._timer: Cancelable | None = None
        self._token: object | None = None

    @property
    def pending(self) -> bool:
        return self._token is not None

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            self.cancel()
            token = object()
            self._token = token
            self._timer = self._timer_factory(delay, lambda: self._fire(token, callback))

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._token = None

    def _fire(self, token: object, callback: Callable[[], None]) -> None:
        with self._lock:
            if token is not self._token:
                return
            self._timer = None
            self._token = None
            callback()


class OpponentMode(Enum):
    OFF = "off"
    AUTOMATED_REPLY = "automated_reply"


class TurnScheduler:
    """
    Schedules the automated opponent's replies.

    Attributes:
        mode:  Whether replies are scheduled at all.
        side:  The side the automated opponent plays.
        delay: Seconds between the triggering move and the reply.
    """

    def __init__(
        self,
        rules: RulesEngine,
        history: HistoryManager,
        *,
        mode: OpponentMode = OpponentMode.OFF,
        side: chess.Color = chess.BLACK,
        delay: float = REPLY_DELAY_SECONDS,
        rng: random.Random | None = None,
        timer_factory: TimerFactory = start_timer,
        lock: AbstractContextManager | None = None,
        on_reply: Callable[[chess.Move], None] | None = None,
    ) -> None:
        self.rules = rules
        self.history = history
        self.mode = mode
        self.side = side
        self.delay = delay
        self.rng = rng if rng is not None else random.Random()
        self.on_reply = on_reply
        self._call = PendingCall(lock, timer_factory)

    @property
    def pending(self) -> bool:
        return self._call.pending

    def maybe_schedule(self) -> bool:
        """
        Cancel any pending reply, then schedule a fresh one if the automated
        side is to move in a game that is still going.

        Returns:
            True if a reply is now pending.
        """
        self._call.cancel()
        if self.mode is not OpponentMode.AUTOMATED_REPLY:
            return False
        if self.rules.turn() != self.side:
            return False
        if derive_status(self.rules).is_terminal:
            return False

        self._call.schedule(self.delay, self.play_reply)
        _log.debug("Automated reply scheduled in %.2fs", self.delay)
        return True

    def cancel(self) -> None:
        if self._call.pending:
            _log.debug("Pending automated reply canceled")
        self._call.cancel()

    def play_reply(self) -> chess.Move | None:
        """
        Apply one uniformly random legal move for the side to move.

        Returns:
            The applied move, or None when there was nothing to play.
        """
        moves = self.rules.legal_moves()
        if not moves:
            _log.debug("Automated reply found no legal moves")
            return None

        choice = moves[self.rng.randrange(len(moves))]
        move = self.rules.try_move(choice.from_square, choice.to_square, choice.promotion)
        if move is None:
            _log.warning("Rules engine rejected its own legal move %s", choice.uci())
            return None

        self.history.record(move)
        _log.info("Automated reply %s", move.uci())
        if self.on_reply is not None:
            self.on_reply(move)
        return move
