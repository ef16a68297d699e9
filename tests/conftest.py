"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures shared by the controller, interface and web tests:
manual timers instead of real threads, a stub random source, and a view that
records every notification it receives.
"""

from typing import Callable

import pytest

from controller.rules import ChessRulesEngine
from controller.view import Banner, BoardView


class ManualTimer:
    """Stands in for a started threading.Timer. Fires only when told to."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.canceled = False
        self.fired = False

    def cancel(self) -> None:
        self.canceled = True


class ManualTimers:
    """Timer factory collecting every timer it creates."""

    def __init__(self) -> None:
        self.created: list[ManualTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.created.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.created if not t.canceled and not t.fired]

    def fire(self, timer: ManualTimer) -> None:
        """Run a timer's callback, even a canceled one (a thread that already woke up)."""
        timer.fired = True
        timer.callback()

    def fire_all(self) -> None:
        for timer in self.live:
            self.fire(timer)


class StubRandom:
    """Random source whose randrange always picks the same index (clamped to the range)."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        return min(self.index, stop - 1)


class RecordingView(BoardView):
    """Records every notification as (name, *args)."""

    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.activate = None

    def on_activate(self, callback) -> None:
        self.activate = callback

    def render(self, fen: str, highlights: tuple[int, ...], selection: int | None) -> None:
        self.events.append(("render", fen, highlights, selection))

    def selection_changed(self, square: int | None) -> None:
        self.events.append(("selection_changed", square))

    def highlights_changed(self, squares: tuple[int, ...]) -> None:
        self.events.append(("highlights_changed", squares))

    def move_applied(self, move, status) -> None:
        self.events.append(("move_applied", move, status))

    def move_undone(self, move, status) -> None:
        self.events.append(("move_undone", move, status))

    def game_reset(self) -> None:
        self.events.append(("game_reset",))

    def opponent_mode_changed(self, mode) -> None:
        self.events.append(("opponent_mode_changed", mode))

    def theme_changed(self, theme: str) -> None:
        self.events.append(("theme_changed", theme))

    def show_banner(self, banner: Banner) -> None:
        self.events.append(("show_banner", banner))

    def hide_banner(self) -> None:
        self.events.append(("hide_banner",))

    def named(self, name: str) -> list[tuple]:
        return [e for e in self.events if e[0] == name]


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def rules() -> ChessRulesEngine:
    return ChessRulesEngine()


@pytest.fixture
def stub_rng() -> StubRandom:
    """Always picks the first legal move."""
    return StubRandom(0)
