"""Candle-shape strategy rules.

Rules that read the body/range geometry of the most recent one or two candles:
engulfing, three white soldiers, strong candle, doji reversal and first
candle of quadrant.

Every rule is a pure function ``window -> Verdict``. On a match the verdict
carries the rule's base confidence; time-of-day seasoning is applied later by
the panel evaluator.
"""

from collections.abc import Sequence
from decimal import Decimal

from candlevote.models import Candle, Color, Verdict
from candlevote.strategies.primitives import body, is_doji, is_strong, requires_candles

ENGULFING_CONFIDENCE = Decimal("92.9")
THREE_WHITE_SOLDIERS_CONFIDENCE = Decimal("92.0")
STRONG_CANDLE_CONFIDENCE = Decimal("90.9")
DOJI_REVERSAL_CONFIDENCE = Decimal("84.2")
FIRST_CANDLE_QUADRANT_CONFIDENCE = Decimal("75.0")

_QUADRANT_MINUTES = 15


@requires_candles(2)
def engulfing(window: Sequence[Candle]) -> Verdict:
    """Single-color engulfing: the current candle swallows a same-colored previous one.

    Green: opens below and closes above the previous open/close.
    Red: opens above and closes below. The current body must also be larger.
    """
    previous, current = window[-2], window[-1]
    same_color = current.color == previous.color

    bullish = (
        current.color is Color.GREEN
        and current.open < previous.open
        and current.close > previous.close
    )
    bearish = (
        current.color is Color.RED
        and current.open > previous.open
        and current.close < previous.close
    )

    if same_color and (bullish or bearish) and body(current) > body(previous):
        direction = "bullish" if current.color is Color.GREEN else "bearish"
        return Verdict(
            prediction=current.color,
            confidence=ENGULFING_CONFIDENCE,
            reasoning=(
                f"{direction.capitalize()} engulfing confirmed: current candle "
                "engulfs the previous one keeping the trend."
            ),
        )

    return Verdict.abstain("engulfing pattern not identified")


@requires_candles(3)
def three_white_soldiers(window: Sequence[Candle]) -> Verdict:
    """Three consecutive strong green candles predict green."""
    last3 = window[-3:]
    if all(c.color is Color.GREEN and is_strong(c) for c in last3):
        return Verdict(
            prediction=Color.GREEN,
            confidence=THREE_WHITE_SOLDIERS_CONFIDENCE,
            reasoning="Three white soldiers: three strong consecutive green candles.",
        )

    return Verdict.abstain("three white soldiers pattern not identified")


@requires_candles(1)
def strong_candle(window: Sequence[Candle]) -> Verdict:
    """A strong current candle predicts its own color."""
    current = window[-1]
    if is_strong(current):
        return Verdict(
            prediction=current.color,
            confidence=STRONG_CANDLE_CONFIDENCE,
            reasoning=(
                f"Strong {current.color.value} candle: large body with short wicks "
                "signals continuation."
            ),
        )

    return Verdict.abstain("strong candle not identified")


@requires_candles(2)
def doji_reversal(window: Sequence[Candle]) -> Verdict:
    """After a doji, predict the opposite of the candle that followed it."""
    previous, current = window[-2], window[-1]
    if is_doji(previous):
        prediction = current.color.opposite
        return Verdict(
            prediction=prediction,
            confidence=DOJI_REVERSAL_CONFIDENCE,
            reasoning=(
                "Doji on the previous candle: reversal expected against the "
                f"current candle ({prediction.value})."
            ),
        )

    return Verdict.abstain("doji not identified")


@requires_candles(1)
def first_candle_quadrant(window: Sequence[Candle]) -> Verdict:
    """A strong candle opening a 15-minute quadrant predicts its own color."""
    current = window[-1]
    minute = current.timestamp.minute
    if minute % _QUADRANT_MINUTES == 0 and is_strong(current):
        return Verdict(
            prediction=current.color,
            confidence=FIRST_CANDLE_QUADRANT_CONFIDENCE,
            reasoning=(
                f"First candle of the quadrant ({minute}min) is strong: "
                f"follow its direction ({current.color.value})."
            ),
        )

    return Verdict.abstain("not the first candle of a quadrant or candle not strong")
