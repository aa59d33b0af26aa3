"""Color-sequence strategy rules.

Rules that only look at the colors of the last three candles: MHI, minority,
color alternation and odd sequence.
"""

from collections.abc import Sequence
from decimal import Decimal

from candlevote.models import Candle, Color, Verdict
from candlevote.strategies.primitives import requires_candles

MHI_CONFIDENCE = Decimal("85.0")
MINORITY_CONFIDENCE = Decimal("80.0")
COLOR_ALTERNATION_CONFIDENCE = Decimal("72.2")
ODD_SEQUENCE_CONFIDENCE = Decimal("71.4")


def _last3_colors(window: Sequence[Candle]) -> list[Color]:
    return [c.color for c in window[-3:]]


@requires_candles(3)
def mhi(window: Sequence[Candle]) -> Verdict:
    """Majority-handicap inversion: fade the majority color of the last 3 candles."""
    colors = _last3_colors(window)
    green = colors.count(Color.GREEN)
    red = colors.count(Color.RED)

    if green >= 2:
        return Verdict(
            prediction=Color.RED,
            confidence=MHI_CONFIDENCE,
            reasoning=f"MHI: {green} green of the last 3 candles, entering the opposite color (red).",
        )
    if red >= 2:
        return Verdict(
            prediction=Color.GREEN,
            confidence=MHI_CONFIDENCE,
            reasoning=f"MHI: {red} red of the last 3 candles, entering the opposite color (green).",
        )

    # Unreachable with three colored candles
    return Verdict.abstain("MHI pattern not identified (balanced candles)")


@requires_candles(3)
def minority(window: Sequence[Candle]) -> Verdict:
    """Side with the single minority color among the last 3 candles."""
    colors = _last3_colors(window)
    green = colors.count(Color.GREEN)
    red = colors.count(Color.RED)

    if green == 1 and red == 2:
        return Verdict(
            prediction=Color.GREEN,
            confidence=MINORITY_CONFIDENCE,
            reasoning="Minority: 1 green and 2 red, siding with the minority (green).",
        )
    if red == 1 and green == 2:
        return Verdict(
            prediction=Color.RED,
            confidence=MINORITY_CONFIDENCE,
            reasoning="Minority: 1 red and 2 green, siding with the minority (red).",
        )

    return Verdict.abstain("minority pattern not identified")


@requires_candles(3)
def color_alternation(window: Sequence[Candle]) -> Verdict:
    """Continue a green/red/green or red/green/red alternation."""
    first, second, third = _last3_colors(window)
    if first == third and second != first:
        prediction = third.opposite
        return Verdict(
            prediction=prediction,
            confidence=COLOR_ALTERNATION_CONFIDENCE,
            reasoning=f"Color alternation identified, next candle keeps the pattern ({prediction.value}).",
        )

    return Verdict.abstain("color alternation pattern not identified")


@requires_candles(3)
def odd_sequence(window: Sequence[Candle]) -> Verdict:
    """Fade a run of three same-colored candles."""
    colors = _last3_colors(window)
    if len(set(colors)) == 1:
        run = colors[0]
        prediction = run.opposite
        return Verdict(
            prediction=prediction,
            confidence=ODD_SEQUENCE_CONFIDENCE,
            reasoning=f"Odd sequence of 3 {run.value} candles, entering against it ({prediction.value}).",
        )

    return Verdict.abstain("odd sequence not identified")
