"""
GameController: the orchestration core.

One controller owns one game. It binds the selection tracker, the move
history and the turn scheduler to a rules engine and pushes every change out
to a BoardView. All public methods hold a single re-entrant lock, which is
also the lock the scheduler's timer callbacks take, so user input and
automated replies are applied strictly one at a time.

Event flow for a human move:
    activate(square) -> SelectionTracker -> RulesEngine.try_move
        committed: HistoryManager.record, view.render / move_applied,
                   TurnScheduler.maybe_schedule
        aborted:   selection and highlights cleared, position untouched
"""

import logging
import random
import threading
from dataclasses import dataclass

import chess

from controller.config import ControllerSettings
from controller.exceptions import NoHistory, NoRedo, UnknownTheme
from controller.history import HistoryManager
from controller.rules import ChessRulesEngine, RulesEngine
from controller.scheduler import OpponentMode, PendingCall, TimerFactory, TurnScheduler, start_timer
from controller.selection import Activation, ActivationKind, SelectionTracker
from controller.status import GameStatus, derive_status
from controller.view import Banner, BoardView, NullView

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only picture of the game, for front ends that poll."""

    fen: str
    status: GameStatus
    selection: int | None
    highlights: tuple[int, ...]
    moves: tuple[str, ...]
    can_undo: bool
    can_redo: bool
    opponent_mode: OpponentMode
    reply_pending: bool
    theme: str
    banner: Banner | None


class GameController:
    """
    Event-driven controller for a single game.

    Attributes:
        rules:      The authoritative position.
        view:       Presentation sink.
        settings:   Tunables; opponent_mode here is the mode every new game
                    starts in.
        history:    Undo/redo stacks.
        selection:  Armed-square tracker.
        scheduler:  Automated opponent scheduler.
        status:     Status derived after the last position change.
        highlights: Squares currently highlighted as candidate destinations.
        theme:      Current board theme.
        banner:     Banner currently shown, if any.
    """

    def __init__(
        self,
        rules: RulesEngine | None = None,
        view: BoardView | None = None,
        settings: ControllerSettings | None = None,
        *,
        rng: random.Random | None = None,
        timer_factory: TimerFactory = start_timer,
    ) -> None:
        self.settings = settings if settings is not None else ControllerSettings()
        self.rules = rules if rules is not None else ChessRulesEngine()
        self.view = view if view is not None else NullView()

        self._lock = threading.RLock()
        self.history = HistoryManager(self.rules)
        self.selection = SelectionTracker(self.rules)
        self.scheduler = TurnScheduler(
            self.rules,
            self.history,
            mode=self.settings.opponent_mode,
            side=self.settings.opponent_side,
            delay=self.settings.reply_delay,
            rng=rng,
            timer_factory=timer_factory,
            lock=self._lock,
            on_reply=self._reply_applied,
        )
        self._banner_call = PendingCall(self._lock, timer_factory)

        self.highlights: tuple[int, ...] = ()
        self._shown_selection: int | None = None
        self.theme: str = self.settings.theme
        self.banner: Banner | None = None
        self.status: GameStatus = derive_status(self.rules)

        self.view.on_activate(self.activate)
        self._render()
        self.scheduler.maybe_schedule()

    # -----------------------------------------------------------------------
    # Read-only accessors
    # -----------------------------------------------------------------------

    @property
    def selected(self) -> int | None:
        return self.selection.armed

    @property
    def opponent_mode(self) -> OpponentMode:
        return self.scheduler.mode

    @property
    def status_text(self) -> str:
        return self.status.text

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return GameSnapshot(
                fen=self.rules.position(),
                status=self.status,
                selection=self.selection.armed,
                highlights=self.highlights,
                moves=tuple(self.rules.san_history()),
                can_undo=self.history.can_undo,
                can_redo=self.history.can_redo,
                opponent_mode=self.scheduler.mode,
                reply_pending=self.scheduler.pending,
                theme=self.theme,
                banner=self.banner,
            )

    # -----------------------------------------------------------------------
    # Input events
    # -----------------------------------------------------------------------

    def activate(self, square: int) -> Activation:
        """Handle a click (or equivalent) on a square."""
        with self._lock:
            result = self.selection.activate(square)

            if result.kind is ActivationKind.ARMED:
                self._set_selection(square, result.highlights)
                self._render()
            elif result.kind is ActivationKind.ABORTED:
                self._set_selection(None, ())
                self._render()
            elif result.kind is ActivationKind.COMMITTED:
                self._set_selection(None, ())
                self.history.record(result.move)
                self._position_changed(result.move)
                self.scheduler.maybe_schedule()
            else:
                _log.debug("Activation on %s ignored", square)

            return result

    def undo(self) -> chess.Move | None:
        """Take back one move. Returns None when there was nothing to undo."""
        with self._lock:
            try:
                move = self.history.undo()
            except NoHistory:
                _log.debug("Undo requested with empty history")
                return None

            self.scheduler.cancel()
            self._set_selection(None, ())
            self.status = derive_status(self.rules)
            self._render()
            self.view.move_undone(move, self.status)
            _log.info("Undid %s; %s", move.uci(), self.status.text)
            return move

    def redo(self) -> chess.Move | None:
        """Re-apply one undone move. Returns None when there was nothing to redo."""
        with self._lock:
            try:
                move = self.history.redo()
            except NoRedo:
                _log.debug("Redo requested with nothing undone")
                return None

            self._set_selection(None, ())
            self._position_changed(move)
            self.scheduler.maybe_schedule()
            return move

    def new_game(self) -> None:
        """Start over: position, history, selection, banner and opponent mode."""
        with self._lock:
            self.scheduler.cancel()
            self._banner_call.cancel()

            self.rules.reset()
            self.history.reset()
            self._set_selection(None, ())
            if self.banner is not None:
                self.banner = None
                self.view.hide_banner()

            if self.scheduler.mode is not self.settings.opponent_mode:
                self.scheduler.mode = self.settings.opponent_mode
                self.view.opponent_mode_changed(self.scheduler.mode)

            self.status = derive_status(self.rules)
            self.view.game_reset()
            self._render()
            _log.info("New game")
            self.scheduler.maybe_schedule()

    def set_opponent_mode(self, mode: OpponentMode) -> None:
        with self._lock:
            self.scheduler.cancel()
            self.scheduler.mode = mode
            self.view.opponent_mode_changed(mode)
            _log.info("Opponent mode set to %s", mode.value)
            if mode is OpponentMode.AUTOMATED_REPLY:
                self.scheduler.maybe_schedule()

    def set_theme(self, theme: str) -> None:
        with self._lock:
            if theme not in self.settings.themes:
                raise UnknownTheme(f"Unknown theme {theme!r}")
            self.theme = theme
            self.view.theme_changed(theme)

    def announce(self, text: str) -> None:
        """Show an informational banner that dismisses itself."""
        with self._lock:
            if self.banner is not None and self.banner.persistent:
                _log.debug("Banner %r suppressed by result banner", text)
                return
            self._show_banner(Banner(text))

    def close(self) -> None:
        """Cancel every outstanding timer. The controller stays usable."""
        with self._lock:
            self.scheduler.cancel()
            self._banner_call.cancel()

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _reply_applied(self, move: chess.Move) -> None:
        # Runs on the timer thread, inside the lock. Any square the player
        # armed while waiting belongs to a position that no longer exists.
        self._set_selection(None, ())
        self._position_changed(move)

    def _position_changed(self, move: chess.Move) -> None:
        self.status = derive_status(self.rules)
        self._render()
        self.view.move_applied(move, self.status)
        _log.info("Move %s; %s", move.uci(), self.status.text)
        if self.status.is_terminal:
            self._show_banner(Banner(self.status.text, persistent=True))

    def _set_selection(self, square: int | None, highlights: tuple[int, ...]) -> None:
        if square is None:
            self.selection.clear()
        if square != self._shown_selection:
            self._shown_selection = square
            self.view.selection_changed(square)
        if highlights != self.highlights:
            self.highlights = highlights
            self.view.highlights_changed(highlights)

    def _show_banner(self, banner: Banner) -> None:
        self._banner_call.cancel()
        self.banner = banner
        self.view.show_banner(banner)
        if not banner.persistent:
            self._banner_call.schedule(self.settings.banner_seconds, self._dismiss_banner)

    def _dismiss_banner(self) -> None:
        self.banner = None
        self.view.hide_banner()

    def _render(self) -> None:
        self.view.render(self.rules.position(), self.highlights, self.selection.armed)
