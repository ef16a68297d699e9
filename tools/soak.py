#!/usr/bin/env python3
"""
Soak run: play many random games through the controller with undo/redo mixed
in, and check after every step that the move history still replays to the
rules engine's position.

White is driven through square activations exactly as a player would click;
Black is the automated opponent. Timers are queued instead of slept on, so a
run of hundreds of games takes seconds.

Usage: python3 -m tools.soak [--games N] [--seed S]   (from the repo root)
"""
import argparse
import logging
import random
import sys
from collections import Counter

import chess

from controller.config import ControllerSettings
from controller.game import GameController
from controller.scheduler import OpponentMode

_log = logging.getLogger("soak")

MAX_PLIES = 300
UNDO_PROBABILITY = 0.1


class _QueuedTimer:
    def __init__(self, callback) -> None:
        self.callback = callback
        self.canceled = False

    def cancel(self) -> None:
        self.canceled = True


class TimerQueue:
    """Timer factory that queues callbacks until run_pending() is called."""

    def __init__(self) -> None:
        self.timers: list[_QueuedTimer] = []

    def __call__(self, delay: float, callback) -> _QueuedTimer:
        timer = _QueuedTimer(callback)
        self.timers.append(timer)
        return timer

    def run_pending(self) -> None:
        timers, self.timers = self.timers, []
        for timer in timers:
            if not timer.canceled:
                timer.callback()


def history_matches(controller: GameController) -> bool:
    """True if replaying the recorded moves reproduces the engine position."""
    replay = chess.Board()
    for move in controller.history.done:
        replay.push(move)
    return replay.fen() == controller.rules.position()


def play_game(seed: int) -> tuple[str, int, bool]:
    """
    Play one game.

    Returns:
        (final phase, plies on the board, lockstep held throughout)
    """
    rng = random.Random(seed)
    timers = TimerQueue()
    controller = GameController(
        settings=ControllerSettings(opponent_mode=OpponentMode.AUTOMATED_REPLY, reply_delay=0.0),
        rng=random.Random(seed + 1),
        timer_factory=timers,
    )

    for _ in range(MAX_PLIES):
        if controller.status.is_terminal:
            break

        if rng.random() < UNDO_PROBABILITY and controller.history.can_undo:
            for _ in range(rng.randint(1, 3)):
                controller.undo()
            for _ in range(rng.randint(0, 2)):
                controller.redo()
        elif controller.rules.turn() == chess.WHITE:
            move = rng.choice(controller.rules.legal_moves())
            controller.activate(move.from_square)
            controller.activate(move.to_square)
        elif not controller.scheduler.pending:
            # Undo left the automated side to move; switching the mode on again
            # schedules its reply.
            controller.set_opponent_mode(OpponentMode.AUTOMATED_REPLY)

        timers.run_pending()
        if not history_matches(controller):
            _log.error("Seed %d: history diverged from engine at %s", seed, controller.rules.position())
            return controller.status.phase.value, len(controller.history.done), False

    controller.close()
    return controller.status.phase.value, len(controller.history.done), True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--games", type=int, default=200)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    phases: Counter[str] = Counter()
    total_plies = 0
    failures = 0
    for game in range(args.games):
        phase, plies, ok = play_game(args.seed + game * 2)
        phases[phase] += 1
        total_plies += plies
        failures += not ok

    print(f"{'Phase':<14} {'Games':>6}")
    print("-" * 21)
    for phase, count in sorted(phases.items()):
        print(f"{phase:<14} {count:>6}")
    print("-" * 21)
    print(f"average plies: {total_plies / max(1, args.games):.1f}")
    print(f"desyncs:       {failures}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
