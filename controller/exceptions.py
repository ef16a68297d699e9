"""Errors raised by the orchestration core."""


class ControllerError(Exception):
    """Base class for every error raised by the controller package."""


class NoHistory(ControllerError):
    """Undo was requested with no applied moves."""


class NoRedo(ControllerError):
    """Redo was requested with no undone moves."""


class HistoryDesync(ControllerError):
    """
    The move history and the rules engine no longer agree.

    This is a programming error, never a user error: the history stacks must
    always replay to the engine's current position. It is never caught inside
    the controller package.
    """


class UnknownTheme(ControllerError, ValueError):
    """A theme name outside the configured set was requested."""
