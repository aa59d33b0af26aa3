"""Tests for the strategy registry and panel construction."""

from decimal import Decimal

import pytest

from candlevote.config import DEFAULT_ACTIVE_STRATEGIES
from candlevote.models import Verdict
from candlevote.strategies.primitives import INSUFFICIENT_DATA
from candlevote.strategies.registry import (
    ALL_STRATEGIES,
    StrategyDefinition,
    build_panel,
    get_strategy,
)


class TestAllStrategies:
    """Tests for the static registry."""

    def test_ten_unique_strategies(self) -> None:
        ids = [d.id for d in ALL_STRATEGIES]
        assert len(ids) == 10
        assert len(set(ids)) == 10

    def test_ordered_by_win_rate(self) -> None:
        rates = [d.win_rate for d in ALL_STRATEGIES]
        assert rates == sorted(rates, reverse=True)

    @pytest.mark.parametrize("definition", ALL_STRATEGIES, ids=lambda d: d.id)
    def test_short_windows_report_insufficient_data(self, definition, colored_window) -> None:
        for length in range(definition.min_candles):
            verdict = definition.rule(colored_window(["green"] * length))
            assert verdict.prediction is None
            assert verdict.reasoning == INSUFFICIENT_DATA

    @pytest.mark.parametrize("definition", ALL_STRATEGIES, ids=lambda d: d.id)
    def test_min_candles_window_is_evaluated(self, definition, colored_window) -> None:
        verdict = definition.rule(colored_window(["green"] * definition.min_candles))
        assert verdict.reasoning != INSUFFICIENT_DATA

    @pytest.mark.parametrize(
        ("strategy_id", "expected"),
        [
            ("engulfing", 2),
            ("three_white_soldiers", 3),
            ("strong_candle", 1),
            ("three_valleys_peaks", 6),
            ("mhi", 3),
            ("doji_reversal", 2),
            ("first_candle_quadrant", 1),
        ],
    )
    def test_min_candles_read_from_rule_guard(self, strategy_id, expected) -> None:
        definition = get_strategy(strategy_id)
        assert definition.min_candles == expected
        assert definition.min_candles == definition.rule.min_candles

    def test_unguarded_rule_needs_one_candle(self) -> None:
        definition = StrategyDefinition(
            id="x",
            name="X",
            description="",
            win_rate=Decimal("50"),
            best_hour=0,
            best_day=0,
            rule=lambda window: Verdict.abstain("never"),
        )
        assert definition.min_candles == 1

    def test_invalid_best_hour_rejected(self) -> None:
        with pytest.raises(ValueError, match="best_hour"):
            StrategyDefinition(
                id="x",
                name="X",
                description="",
                win_rate=Decimal("50"),
                best_hour=24,
                best_day=0,
                rule=lambda window: None,  # type: ignore[arg-type,return-value]
            )

    def test_invalid_best_day_rejected(self) -> None:
        with pytest.raises(ValueError, match="best_day"):
            StrategyDefinition(
                id="x",
                name="X",
                description="",
                win_rate=Decimal("50"),
                best_hour=0,
                best_day=7,
                rule=lambda window: None,  # type: ignore[arg-type,return-value]
            )


class TestGetStrategy:
    """Tests for get_strategy."""

    def test_known_id(self) -> None:
        assert get_strategy("engulfing").name == "Single-Color Engulfing"

    def test_unknown_id_raises(self) -> None:
        with pytest.raises(KeyError, match="Unknown strategy"):
            get_strategy("head_and_shoulders")


class TestBuildPanel:
    """Tests for build_panel."""

    def test_default_panel(self) -> None:
        panel = build_panel(DEFAULT_ACTIVE_STRATEGIES)
        assert [d.id for d in panel] == [
            "engulfing",
            "three_white_soldiers",
            "strong_candle",
            "three_valleys_peaks",
            "mhi",
        ]

    def test_order_follows_input(self) -> None:
        panel = build_panel(["mhi", "engulfing"])
        assert [d.id for d in panel] == ["mhi", "engulfing"]

    def test_panel_is_immutable_tuple(self) -> None:
        assert isinstance(build_panel(["mhi"]), tuple)

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            build_panel(["mhi", "mhi"])

    def test_unknown_id_rejected(self) -> None:
        with pytest.raises(KeyError):
            build_panel(["mhi", "nope"])
