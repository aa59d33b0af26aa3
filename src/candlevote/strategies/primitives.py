"""Candle shape primitives shared by the strategy rules.

CRITICAL: All computations use Decimal. Never use float.
"""

import functools
from collections.abc import Callable, Sequence
from decimal import Decimal

from candlevote.models import Candle, Verdict

Rule = Callable[[Sequence[Candle]], Verdict]

#: Body below 10% of the range marks a doji.
DOJI_BODY_RATIO = Decimal("0.10")

#: Body above 70% of the range marks a strong candle.
STRONG_BODY_RATIO = Decimal("0.70")

#: Reasoning shared by every rule when the window is too short.
INSUFFICIENT_DATA = "insufficient data"


def requires_candles(count: int) -> Callable[[Rule], Rule]:
    """Abstain with INSUFFICIENT_DATA on windows shorter than ``count``.

    The decorated rule exposes ``count`` as ``min_candles``; the registry reads
    it from there.
    """

    def decorator(rule: Rule) -> Rule:
        @functools.wraps(rule)
        def guarded(window: Sequence[Candle]) -> Verdict:
            if len(window) < count:
                return Verdict.abstain(INSUFFICIENT_DATA)
            return rule(window)

        guarded.min_candles = count  # type: ignore[attr-defined]
        return guarded

    return decorator


def body(candle: Candle) -> Decimal:
    return abs(candle.close - candle.open)


def upper_wick(candle: Candle) -> Decimal:
    return candle.high - max(candle.open, candle.close)


def lower_wick(candle: Candle) -> Decimal:
    return min(candle.open, candle.close) - candle.low


def candle_range(candle: Candle) -> Decimal:
    return candle.high - candle.low


def is_doji(candle: Candle) -> bool:
    """True when the body is under 10% of a non-zero range."""
    total_range = candle_range(candle)
    return total_range > 0 and body(candle) / total_range < DOJI_BODY_RATIO


def is_strong(candle: Candle) -> bool:
    """True when the body is over 70% of a non-zero range."""
    total_range = candle_range(candle)
    return total_range > 0 and body(candle) / total_range > STRONG_BODY_RATIO
