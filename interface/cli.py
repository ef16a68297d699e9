"""
Terminal front end for the game controller.

A line-oriented loop: the player types square names to select and move
pieces, plus a handful of commands. The board is redrawn on stdout after
every change, including changes made by the automated opponent on its timer
thread. Diagnostics go through logging to stderr so stdout only ever carries
the board and command replies.

Commands:
    e2            activate a square (select a piece, or move the selected one)
    e2e4          two activations in one line
    undo / redo   step through the move history
    new           start a new game
    opponent on|off
    theme <name>
    moves         print the move list in SAN
    show          redraw the board
    quit
"""

import argparse
import logging
import sys
from typing import Iterable, TextIO

import chess

from controller.config import ControllerSettings
from controller.exceptions import UnknownTheme
from controller.game import GameController
from controller.scheduler import OpponentMode
from controller.status import GameStatus
from controller.view import Banner, BoardView

_log = logging.getLogger(__name__)

_FILES = "abcdefgh"


def board_text(fen: str, highlights: Iterable[int] = (), selection: int | None = None) -> str:
    """
    Draw a position as text, White at the bottom.

    Every square is two characters: the piece letter (or '.') followed by a
    marker, '<' for the selected square and '*' for a candidate destination.
    """
    board = chess.Board(fen)
    marked = set(highlights)
    lines = ["   " + " ".join(f"{f} " for f in _FILES)]
    for rank in range(7, -1, -1):
        cells = []
        for file in range(8):
            square = chess.square(file, rank)
            piece = board.piece_at(square)
            symbol = piece.symbol() if piece else "."
            if square == selection:
                marker = "<"
            elif square in marked:
                marker = "*"
            else:
                marker = " "
            cells.append(symbol + marker)
        lines.append(f"{rank + 1}  " + " ".join(cells) + f" {rank + 1}")
    lines.append(lines[0])
    return "\n".join(lines)


class TerminalView(BoardView):
    """BoardView that prints to a text stream."""

    def __init__(self, out: TextIO = sys.stdout) -> None:
        self.out = out

    def _send(self, line: str) -> None:
        print(line, file=self.out, flush=True)

    def render(self, fen: str, highlights: tuple[int, ...], selection: int | None) -> None:
        self._send(board_text(fen, highlights, selection))

    def move_applied(self, move: chess.Move, status: GameStatus) -> None:
        self._send(f"{move.uci()}  {status.text}")

    def move_undone(self, move: chess.Move, status: GameStatus) -> None:
        self._send(f"undid {move.uci()}  {status.text}")

    def game_reset(self) -> None:
        self._send("new game")

    def opponent_mode_changed(self, mode: OpponentMode) -> None:
        self._send(f"opponent {mode.value}")

    def theme_changed(self, theme: str) -> None:
        self._send(f"theme {theme}")

    def show_banner(self, banner: Banner) -> None:
        self._send(f"*** {banner.text} ***")


class CliHandler:
    """
    Dispatches command lines to a GameController.

    Attributes:
        controller: The game being played.
        out:        Stream for command replies.
    """

    def __init__(self, controller: GameController, out: TextIO = sys.stdout) -> None:
        self.controller = controller
        self.out = out

    def _send(self, line: str) -> None:
        print(line, file=self.out, flush=True)

    def handle_squares(self, token: str) -> None:
        """Activate one square ("e2") or two in a row ("e2e4")."""
        names = [token[i:i + 2] for i in range(0, len(token), 2)]
        try:
            squares = [chess.parse_square(name) for name in names]
        except ValueError:
            _log.debug("Unparsable input %r", token)
            self._send(f"unknown square or command: {token}")
            return
        for square in squares:
            self.controller.activate(square)

    def handle_undo(self) -> None:
        if self.controller.undo() is None:
            self._send("nothing to undo")

    def handle_redo(self) -> None:
        if self.controller.redo() is None:
            self._send("nothing to redo")

    def handle_opponent(self, tokens: list[str]) -> None:
        if tokens == ["on"]:
            self.controller.set_opponent_mode(OpponentMode.AUTOMATED_REPLY)
        elif tokens == ["off"]:
            self.controller.set_opponent_mode(OpponentMode.OFF)
        else:
            self._send("usage: opponent on|off")

    def handle_theme(self, tokens: list[str]) -> None:
        if len(tokens) != 1:
            self._send("themes: " + " ".join(self.controller.settings.themes))
            return
        try:
            self.controller.set_theme(tokens[0])
        except UnknownTheme as exc:
            self._send(str(exc))

    def handle_moves(self) -> None:
        moves = self.controller.snapshot().moves
        pairs = []
        for i in range(0, len(moves), 2):
            pairs.append(f"{i // 2 + 1}. " + " ".join(moves[i:i + 2]))
        self._send(" ".join(pairs) if pairs else "no moves yet")

    def handle_show(self) -> None:
        snap = self.controller.snapshot()
        self._send(board_text(snap.fen, snap.highlights, snap.selection))
        self._send(snap.status.text)

    def handle_line(self, line: str) -> bool:
        """Run one command line. Returns False once the player quits."""
        tokens = line.strip().lower().split()
        if not tokens:
            return True

        command, args = tokens[0], tokens[1:]
        if command in ("quit", "exit"):
            return False
        if command == "undo":
            self.handle_undo()
        elif command == "redo":
            self.handle_redo()
        elif command == "new":
            self.controller.new_game()
        elif command == "opponent":
            self.handle_opponent(args)
        elif command == "theme":
            self.handle_theme(args)
        elif command == "moves":
            self.handle_moves()
        elif command == "show":
            self.handle_show()
        else:
            self.handle_squares(command)
        return True


def run_cli_loop(controller: GameController, lines: Iterable[str], out: TextIO = sys.stdout) -> None:
    """Read command lines until "quit" or end of input, then cancel all timers."""
    handler = CliHandler(controller, out)
    try:
        for raw_line in lines:
            if not handler.handle_line(raw_line):
                break
    finally:
        controller.close()
        _log.debug("Terminal session closed")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play chess in the terminal.")
    parser.add_argument("--opponent", action="store_true", help="let the computer answer your moves")
    parser.add_argument("--play-black", action="store_true", help="the computer plays White")
    parser.add_argument("--delay", type=float, default=None, help="seconds before the computer replies")
    parser.add_argument("--verbose", action="store_true", help="debug logging on stderr")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = {
        "opponent_mode": OpponentMode.AUTOMATED_REPLY if args.opponent else OpponentMode.OFF,
        "opponent_side": chess.WHITE if args.play_black else chess.BLACK,
    }
    if args.delay is not None:
        settings["reply_delay"] = args.delay

    controller = GameController(view=TerminalView(), settings=ControllerSettings(**settings))
    run_cli_loop(controller, sys.stdin)


if __name__ == "__main__":
    main()
