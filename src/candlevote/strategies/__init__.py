"""Strategy rules, registry and confidence seasoning.

Ten pure pattern rules (``window -> Verdict``) grouped by what they read:
candle shape, color sequence and price structure. The registry carries each
rule's static metadata and builds the active panel; the timing module adds
the best-hour/best-day confidence bonus.
"""

from candlevote.strategies.registry import (
    ALL_STRATEGIES,
    StrategyDefinition,
    build_panel,
    get_strategy,
)
from candlevote.strategies.sequence import color_alternation, mhi, minority, odd_sequence
from candlevote.strategies.shape import (
    doji_reversal,
    engulfing,
    first_candle_quadrant,
    strong_candle,
    three_white_soldiers,
)
from candlevote.strategies.structure import three_valleys_peaks
from candlevote.strategies.timing import adjust_confidence, compute_time_bonus

__all__ = [
    "ALL_STRATEGIES",
    "StrategyDefinition",
    "adjust_confidence",
    "build_panel",
    "color_alternation",
    "compute_time_bonus",
    "doji_reversal",
    "engulfing",
    "first_candle_quadrant",
    "get_strategy",
    "mhi",
    "minority",
    "odd_sequence",
    "strong_candle",
    "three_valleys_peaks",
    "three_white_soldiers",
]
