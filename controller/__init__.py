"""
Board-game controller package.

This package implements the move/turn orchestration core of an interactive
chess board: selecting and moving pieces, a linear undo/redo history kept in
lockstep with the rules engine, and a delayed automated opponent. Chess rules
themselves come from python-chess.

Modules:
    constants  — Timing, clamping ranges and theme defaults
    exceptions — Error taxonomy (NoHistory, NoRedo, HistoryDesync, UnknownTheme)
    rules      — RulesEngine interface and the python-chess adapter
    selection  — Armed-square tracking and move attempts
    history    — Undo/redo stacks in lockstep with the rules engine
    scheduler  — Cancelable delayed automated replies
    status     — Game phase derivation and status text
    view       — BoardView presentation sink and banners
    config     — ControllerSettings
    game       — GameController, the top-level orchestrator
"""
