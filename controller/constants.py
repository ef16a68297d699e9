"""
Controller constants: timing, clamping ranges, and presentation defaults.

All numeric constants used by the orchestration core live here so that the
scheduler, the banner timer and the front ends never introduce their own
magic numbers.
"""

# ---------------------------------------------------------------------------
# Automated opponent
# ---------------------------------------------------------------------------
# Delay between a recorded move and the automated reply. Long enough for the
# player to see their own move land before the reply is applied.

REPLY_DELAY_SECONDS: float = 0.5

# Clamp range for a configured reply delay. Zero is allowed (tests, soak runs).
MIN_REPLY_DELAY_SECONDS: float = 0.0
MAX_REPLY_DELAY_SECONDS: float = 10.0

# ---------------------------------------------------------------------------
# Banners
# ---------------------------------------------------------------------------
# Informational (non-terminal) banners auto-dismiss after this interval.
# Terminal banners (checkmate, draw) stay up until a new game starts.

BANNER_SECONDS: float = 3.0

MIN_BANNER_SECONDS: float = 0.5
MAX_BANNER_SECONDS: float = 60.0

# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------

THEMES: tuple[str, ...] = ("classic", "wood", "ocean", "contrast")
DEFAULT_THEME: str = "classic"
