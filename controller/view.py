"""
The presentation sink the controller pushes state to.

A BoardView only renders. It never changes the game: activations reach the
controller through whatever input mechanism the front end has (a terminal
loop, an HTTP route) and come back out here as notifications. Every
notification except render() defaults to doing nothing, so a view overrides
only what it shows.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import chess

from controller.scheduler import OpponentMode
from controller.status import GameStatus


@dataclass(frozen=True)
class Banner:
    """
    Fields:
        text:       Message to display.
        persistent: True for terminal results, which stay up until a new
                    game starts. Other banners auto-dismiss.
    """

    text: str
    persistent: bool = False


class BoardView(ABC):
    @abstractmethod
    def render(self, fen: str, highlights: tuple[int, ...], selection: int | None) -> None:
        """Draw the position with the given highlighted and selected squares."""

    def on_activate(self, callback: Callable[[int], object]) -> None:
        """Receive the function to call when the player activates a square."""

    def selection_changed(self, square: int | None) -> None:
        pass

    def highlights_changed(self, squares: tuple[int, ...]) -> None:
        pass

    def move_applied(self, move: chess.Move, status: GameStatus) -> None:
        pass

    def move_undone(self, move: chess.Move, status: GameStatus) -> None:
        pass

    def game_reset(self) -> None:
        pass

    def opponent_mode_changed(self, mode: OpponentMode) -> None:
        pass

    def theme_changed(self, theme: str) -> None:
        pass

    def show_banner(self, banner: Banner) -> None:
        pass

    def hide_banner(self) -> None:
        pass


class NullView(BoardView):
    """A view that discards everything. Used when no front end is attached."""

    def render(self, fen: str, highlights: tuple[int, ...], selection: int | None) -> None:
        pass
