"""Tests for candle-shape rules: engulfing, three white soldiers, strong candle,
doji reversal and first candle of quadrant.

Rules return their base confidence; the time bonus is tested separately.
"""

from datetime import datetime, timezone
from decimal import Decimal

from candlevote.models import Color
from candlevote.strategies.primitives import INSUFFICIENT_DATA
from candlevote.strategies.shape import (
    DOJI_REVERSAL_CONFIDENCE,
    ENGULFING_CONFIDENCE,
    FIRST_CANDLE_QUADRANT_CONFIDENCE,
    STRONG_CANDLE_CONFIDENCE,
    THREE_WHITE_SOLDIERS_CONFIDENCE,
    doji_reversal,
    engulfing,
    first_candle_quadrant,
    strong_candle,
    three_white_soldiers,
)


class TestEngulfing:
    """Tests for single-color engulfing."""

    def test_bullish_engulfing(self, make_candle) -> None:
        previous = make_candle("1.1002", "1.1006", "1.1001", "1.1005", index=0)
        current = make_candle("1.1001", "1.1009", "1.1000", "1.1008", index=1)
        verdict = engulfing([previous, current])
        assert verdict.prediction is Color.GREEN
        assert verdict.confidence == ENGULFING_CONFIDENCE
        assert "engulfing" in verdict.reasoning.lower()

    def test_bearish_engulfing(self, make_candle) -> None:
        previous = make_candle("1.1005", "1.1006", "1.1001", "1.1002", index=0)
        current = make_candle("1.1006", "1.1007", "1.1000", "1.1000", index=1)
        verdict = engulfing([previous, current])
        assert verdict.prediction is Color.RED
        assert verdict.confidence == ENGULFING_CONFIDENCE

    def test_opposite_colors_abstain(self, make_candle) -> None:
        """Classic two-color engulfing does not count."""
        previous = make_candle("1.1005", "1.1006", "1.1001", "1.1002", index=0)
        current = make_candle("1.1001", "1.1009", "1.1000", "1.1008", index=1)
        verdict = engulfing([previous, current])
        assert verdict.prediction is None
        assert verdict.reasoning == "engulfing pattern not identified"

    def test_not_engulfing_abstains(self, colored_window) -> None:
        """Identical green candles: open is not below the previous open."""
        verdict = engulfing(colored_window(["green", "green"]))
        assert verdict.prediction is None

    def test_single_candle_insufficient(self, colored_window) -> None:
        verdict = engulfing(colored_window(["green"]))
        assert verdict.prediction is None
        assert verdict.reasoning == INSUFFICIENT_DATA


class TestThreeWhiteSoldiers:
    """Tests for three white soldiers."""

    def test_three_strong_greens(self, colored_window) -> None:
        verdict = three_white_soldiers(colored_window(["red", "green", "green", "green"]))
        assert verdict.prediction is Color.GREEN
        assert verdict.confidence == THREE_WHITE_SOLDIERS_CONFIDENCE

    def test_weak_green_abstains(self, shaped_candle) -> None:
        window = [
            shaped_candle("green", "strong", index=0),
            shaped_candle("green", "weak", index=1),
            shaped_candle("green", "strong", index=2),
        ]
        verdict = three_white_soldiers(window)
        assert verdict.prediction is None
        assert verdict.reasoning == "three white soldiers pattern not identified"

    def test_red_in_last_three_abstains(self, colored_window) -> None:
        verdict = three_white_soldiers(colored_window(["green", "red", "green"]))
        assert verdict.prediction is None


class TestStrongCandle:
    """Tests for the strong candle rule."""

    def test_strong_green(self, colored_window) -> None:
        verdict = strong_candle(colored_window(["green"]))
        assert verdict.prediction is Color.GREEN
        assert verdict.confidence == STRONG_CANDLE_CONFIDENCE

    def test_strong_red(self, colored_window) -> None:
        verdict = strong_candle(colored_window(["green", "red"]))
        assert verdict.prediction is Color.RED

    def test_weak_abstains(self, colored_window) -> None:
        verdict = strong_candle(colored_window(["green"], shape="weak"))
        assert verdict.prediction is None
        assert verdict.confidence == Decimal("0")
        assert verdict.reasoning == "strong candle not identified"

    def test_empty_window_insufficient(self) -> None:
        verdict = strong_candle([])
        assert verdict.prediction is None
        assert verdict.reasoning == INSUFFICIENT_DATA


class TestDojiReversal:
    """Tests for the post-doji reversal rule."""

    def test_doji_then_green_predicts_red(self, shaped_candle) -> None:
        window = [
            shaped_candle("green", "doji", index=0),
            shaped_candle("green", "strong", index=1),
        ]
        verdict = doji_reversal(window)
        assert verdict.prediction is Color.RED
        assert verdict.confidence == DOJI_REVERSAL_CONFIDENCE

    def test_doji_then_red_predicts_green(self, shaped_candle) -> None:
        window = [
            shaped_candle("red", "doji", index=0),
            shaped_candle("red", "weak", index=1),
        ]
        verdict = doji_reversal(window)
        assert verdict.prediction is Color.GREEN

    def test_doji_on_current_candle_is_ignored(self, shaped_candle) -> None:
        """Only the second-to-last candle is checked."""
        window = [
            shaped_candle("green", "weak", index=0),
            shaped_candle("green", "doji", index=1),
        ]
        verdict = doji_reversal(window)
        assert verdict.prediction is None
        assert verdict.reasoning == "doji not identified"


class TestFirstCandleQuadrant:
    """Tests for the first candle of quadrant rule."""

    def _at_minute(self, shaped_candle, minute: int, color: str = "green", shape: str = "strong"):  # type: ignore[no-untyped-def]
        timestamp = datetime(2025, 1, 6, 10, minute, tzinfo=timezone.utc)
        return shaped_candle(color, shape, timestamp=timestamp)

    def test_strong_candle_on_quadrant(self, shaped_candle) -> None:
        for minute in (0, 15, 30, 45):
            verdict = first_candle_quadrant([self._at_minute(shaped_candle, minute, "red")])
            assert verdict.prediction is Color.RED
            assert verdict.confidence == FIRST_CANDLE_QUADRANT_CONFIDENCE
            assert f"({minute}min)" in verdict.reasoning

    def test_off_quadrant_abstains(self, shaped_candle) -> None:
        verdict = first_candle_quadrant([self._at_minute(shaped_candle, 16)])
        assert verdict.prediction is None
        assert verdict.reasoning == "not the first candle of a quadrant or candle not strong"

    def test_weak_candle_on_quadrant_abstains(self, shaped_candle) -> None:
        verdict = first_candle_quadrant([self._at_minute(shaped_candle, 30, shape="weak")])
        assert verdict.prediction is None
