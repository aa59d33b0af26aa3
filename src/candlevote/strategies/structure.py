"""Price-structure strategy rule: three valleys / three peaks.

Splits the last six candles into three consecutive pairs and compares the
lowest low (valley) and highest high (peak) of each pair.
"""

from collections.abc import Sequence
from decimal import Decimal

from candlevote.models import Candle, Color, Verdict
from candlevote.strategies.primitives import requires_candles

THREE_VALLEYS_PEAKS_CONFIDENCE = Decimal("85.7")

_LOOKBACK = 6


@requires_candles(_LOOKBACK)
def three_valleys_peaks(window: Sequence[Candle]) -> Verdict:
    """Ascending valleys predict green, otherwise descending peaks predict red.

    The valley check runs first. When a window satisfies both conditions the
    valley reading wins; that precedence is a convention, not a market property.
    """
    recent = window[-_LOOKBACK:]
    pairs = [recent[i : i + 2] for i in range(0, _LOOKBACK, 2)]

    valley1, valley2, valley3 = (min(c.low for c in pair) for pair in pairs)
    if valley1 < valley2 < valley3:
        return Verdict(
            prediction=Color.GREEN,
            confidence=THREE_VALLEYS_PEAKS_CONFIDENCE,
            reasoning="Three ascending valleys identified: reversal from down to up.",
        )

    peak1, peak2, peak3 = (max(c.high for c in pair) for pair in pairs)
    if peak1 > peak2 > peak3:
        return Verdict(
            prediction=Color.RED,
            confidence=THREE_VALLEYS_PEAKS_CONFIDENCE,
            reasoning="Three descending peaks identified: reversal from up to down.",
        )

    return Verdict.abstain("three valleys/peaks pattern not identified")
