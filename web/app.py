"""
FastAPI web application for the game controller.

Exposes the controller's event API over JSON: a browser board posts square
activations and history/mode commands, and every route answers with the full
game state so the client can redraw from a single response.

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool.
  The controller serialises them with its own lock, together with the
  automated opponent's timer thread.
- One shared game per process, held in memory only. Restarting the server
  starts a fresh game.
- The controller is obtained through the get_controller dependency so tests
  can substitute one driven by manual timers.
"""

import logging
import os

import chess
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from controller.config import ControllerSettings
from controller.exceptions import UnknownTheme
from controller.game import GameController, GameSnapshot
from controller.scheduler import OpponentMode

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="Chess Board Controller", version="1.0.0")


def settings_from_env() -> ControllerSettings:
    """
    Build settings from the environment.

    CHESS_REPLY_DELAY: seconds before the automated reply (float).
    CHESS_OPPONENT:    "on" to start every game against the automated opponent.
    """
    values: dict = {}
    delay = os.environ.get("CHESS_REPLY_DELAY")
    if delay:
        try:
            values["reply_delay"] = float(delay)
        except ValueError:
            _log.warning("Ignoring CHESS_REPLY_DELAY=%r: not a number of seconds", delay)
    if os.environ.get("CHESS_OPPONENT", "").lower() == "on":
        values["opponent_mode"] = OpponentMode.AUTOMATED_REPLY
    return ControllerSettings(**values)


_controller = GameController(settings=settings_from_env())


def get_controller() -> GameController:
    return _controller


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class ActivateRequest(BaseModel):
    """
    A click on a square.

    Fields:
        square: Square name in algebraic notation ("e2").
    """

    square: str


class OpponentRequest(BaseModel):
    mode: OpponentMode


class ThemeRequest(BaseModel):
    theme: str


class StateResponse(BaseModel):
    """
    Complete game state after handling a request.

    Fields:
        fen:             Current position.
        turn:            "white" or "black".
        status:          Human-readable status line.
        phase:           in_progress, check, checkmate, stalemate or draw.
        winner:          "white" or "black" after checkmate, otherwise null.
        selection:       Armed square name, or null.
        highlights:      Candidate destination square names.
        moves:           Move list in SAN.
        can_undo:        Whether undo would do anything.
        can_redo:        Whether redo would do anything.
        opponent_mode:   "off" or "automated_reply".
        reply_pending:   An automated reply is scheduled.
        theme:           Current board theme.
        banner:          Banner text, or null.
        banner_persistent: The banner stays up until a new game.
    """

    fen: str
    turn: str
    status: str
    phase: str
    winner: str | None
    selection: str | None
    highlights: list[str]
    moves: list[str]
    can_undo: bool
    can_redo: bool
    opponent_mode: str
    reply_pending: bool
    theme: str
    banner: str | None
    banner_persistent: bool

    @classmethod
    def from_snapshot(cls, snap: GameSnapshot) -> "StateResponse":
        status = snap.status
        return cls(
            fen=snap.fen,
            turn=chess.COLOR_NAMES[status.turn],
            status=status.text,
            phase=status.phase.value,
            winner=None if status.winner is None else chess.COLOR_NAMES[status.winner],
            selection=None if snap.selection is None else chess.square_name(snap.selection),
            highlights=[chess.square_name(sq) for sq in snap.highlights],
            moves=list(snap.moves),
            can_undo=snap.can_undo,
            can_redo=snap.can_redo,
            opponent_mode=snap.opponent_mode.value,
            reply_pending=snap.reply_pending,
            theme=snap.theme,
            banner=None if snap.banner is None else snap.banner.text,
            banner_persistent=snap.banner is not None and snap.banner.persistent,
        )


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.get("/api/state", response_model=StateResponse)
def api_state(controller: GameController = Depends(get_controller)) -> StateResponse:
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/activate", response_model=StateResponse)
def api_activate(
    request: ActivateRequest,
    controller: GameController = Depends(get_controller),
) -> StateResponse:
    """
    Activate a square: arm a piece, or move the armed piece there.

    Raises:
        HTTPException 400: The square name is not algebraic notation.
    """
    try:
        square = chess.parse_square(request.square.strip().lower())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid square: {request.square!r}") from exc

    result = controller.activate(square)
    _log.debug("Activate %s -> %s", request.square, result.kind.value)
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/undo", response_model=StateResponse)
def api_undo(controller: GameController = Depends(get_controller)) -> StateResponse:
    controller.undo()
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/redo", response_model=StateResponse)
def api_redo(controller: GameController = Depends(get_controller)) -> StateResponse:
    controller.redo()
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/new", response_model=StateResponse)
def api_new(controller: GameController = Depends(get_controller)) -> StateResponse:
    controller.new_game()
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/opponent", response_model=StateResponse)
def api_opponent(
    request: OpponentRequest,
    controller: GameController = Depends(get_controller),
) -> StateResponse:
    controller.set_opponent_mode(request.mode)
    return StateResponse.from_snapshot(controller.snapshot())


@app.post("/api/theme", response_model=StateResponse)
def api_theme(
    request: ThemeRequest,
    controller: GameController = Depends(get_controller),
) -> StateResponse:
    """
    Raises:
        HTTPException 400: The theme is not one of the configured themes.
    """
    try:
        controller.set_theme(request.theme)
    except UnknownTheme as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return StateResponse.from_snapshot(controller.snapshot())
