"""Controller settings."""

import chess
from pydantic import BaseModel, field_validator, model_validator

from controller.constants import (
    BANNER_SECONDS,
    DEFAULT_THEME,
    MAX_BANNER_SECONDS,
    MAX_REPLY_DELAY_SECONDS,
    MIN_BANNER_SECONDS,
    MIN_REPLY_DELAY_SECONDS,
    REPLY_DELAY_SECONDS,
    THEMES,
)
from controller.scheduler import OpponentMode


class ControllerSettings(BaseModel):
    """
    Tunables for one GameController.

    Fields:
        reply_delay:    Seconds before the automated reply is applied
                        (clamped to [0.0, 10.0]).
        banner_seconds: Lifetime of informational banners (clamped to
                        [0.5, 60.0]). Terminal banners ignore it.
        opponent_mode:  Mode restored on every new game.
        opponent_side:  Side the automated opponent plays (chess.WHITE is
                        True, chess.BLACK is False).
        themes:         Theme names the controller accepts.
        theme:          Initial theme; must be one of `themes`.
    """

    reply_delay: float = REPLY_DELAY_SECONDS
    banner_seconds: float = BANNER_SECONDS
    opponent_mode: OpponentMode = OpponentMode.OFF
    opponent_side: bool = chess.BLACK
    themes: tuple[str, ...] = THEMES
    theme: str = DEFAULT_THEME

    @field_validator("reply_delay")
    @classmethod
    def clamp_reply_delay(cls, v: float) -> float:
        """Clamp reply_delay to a safe operating range."""
        return max(MIN_REPLY_DELAY_SECONDS, min(v, MAX_REPLY_DELAY_SECONDS))

    @field_validator("banner_seconds")
    @classmethod
    def clamp_banner_seconds(cls, v: float) -> float:
        return max(MIN_BANNER_SECONDS, min(v, MAX_BANNER_SECONDS))

    @model_validator(mode="after")
    def check_theme(self) -> "ControllerSettings":
        if self.theme not in self.themes:
            raise ValueError(f"theme {self.theme!r} is not one of {list(self.themes)}")
        return self
