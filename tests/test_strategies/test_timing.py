"""Tests for the time-of-day / day-of-week confidence bonus."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from candlevote.strategies.registry import ALL_STRATEGIES, get_strategy
from candlevote.strategies.timing import (
    MAX_CONFIDENCE,
    adjust_confidence,
    compute_time_bonus,
    sunday_based_weekday,
)

# MHI: best hour 10, best day 1 (Monday)
MONDAY_10H = datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc)


class TestSundayBasedWeekday:
    """Tests for the 0 = Sunday weekday convention."""

    @pytest.mark.parametrize(
        ("day", "expected"),
        [(5, 0), (6, 1), (7, 2), (8, 3), (9, 4), (10, 5), (11, 6)],
    )
    def test_january_2025(self, day: int, expected: int) -> None:
        assert sunday_based_weekday(datetime(2025, 1, day, tzinfo=timezone.utc)) == expected


class TestComputeTimeBonus:
    """Tests for compute_time_bonus."""

    def test_best_hour_and_day_gives_full_bonus(self) -> None:
        assert compute_time_bonus(get_strategy("mhi"), MONDAY_10H) == Decimal("8")

    def test_two_hours_off(self) -> None:
        moment = MONDAY_10H.replace(hour=12)
        assert compute_time_bonus(get_strategy("mhi"), moment) == Decimal("7")

    def test_one_day_off(self) -> None:
        """Sunday is one day from Monday: 5 + 2.5."""
        moment = MONDAY_10H - timedelta(days=1)
        assert compute_time_bonus(get_strategy("mhi"), moment) == Decimal("7.5")

    def test_no_wrap_around_on_hours(self) -> None:
        """Hour 23 vs best hour 10 is 13 apart: hour bonus decays to zero."""
        moment = MONDAY_10H.replace(hour=23)
        assert compute_time_bonus(get_strategy("mhi"), moment) == Decimal("3")

    def test_far_from_both_gives_zero(self) -> None:
        """Saturday 23h vs Monday 10h: 13 hours and 5 days apart."""
        moment = datetime(2025, 1, 11, 23, 0, tzinfo=timezone.utc)
        assert compute_time_bonus(get_strategy("mhi"), moment) == Decimal("0.5")

    @pytest.mark.parametrize("definition", ALL_STRATEGIES, ids=lambda d: d.id)
    def test_bonus_is_bounded(self, definition) -> None:
        for hours in range(0, 24 * 7, 5):
            bonus = compute_time_bonus(definition, MONDAY_10H + timedelta(hours=hours))
            assert Decimal("0") <= bonus <= Decimal("8")


class TestAdjustConfidence:
    """Tests for adjust_confidence."""

    @pytest.mark.parametrize("definition", ALL_STRATEGIES, ids=lambda d: d.id)
    def test_stays_within_base_and_cap(self, definition) -> None:
        base = definition.win_rate
        for hours in range(0, 24 * 7, 7):
            adjusted = adjust_confidence(base, definition, MONDAY_10H + timedelta(hours=hours))
            assert base <= adjusted <= min(MAX_CONFIDENCE, base + 8)

    def test_clamped_at_one_hundred(self) -> None:
        adjusted = adjust_confidence(Decimal("95"), get_strategy("mhi"), MONDAY_10H)
        assert adjusted == Decimal("100")

    def test_closer_hour_never_lowers_confidence(self) -> None:
        definition = get_strategy("mhi")
        base = Decimal("85.0")
        previous = Decimal("0")
        for hour in range(0, 11):
            adjusted = adjust_confidence(base, definition, MONDAY_10H.replace(hour=hour))
            assert adjusted >= previous
            previous = adjusted

    @pytest.mark.parametrize("definition", ALL_STRATEGIES, ids=lambda d: d.id)
    def test_farther_day_never_raises_confidence(self, definition) -> None:
        base = Decimal("50")
        sunday = datetime(2025, 1, 5, definition.best_hour, 0, tzinfo=timezone.utc)
        for step in (1, -1):
            previous = None
            day = definition.best_day
            while 0 <= day <= 6:
                adjusted = adjust_confidence(base, definition, sunday + timedelta(days=day))
                if previous is not None:
                    assert adjusted <= previous
                previous = adjusted
                day += step

    def test_each_day_away_costs_half_a_point(self) -> None:
        definition = get_strategy("mhi")
        base = Decimal("85.0")
        adjusted = [
            adjust_confidence(base, definition, MONDAY_10H + timedelta(days=days))
            for days in range(6)
        ]
        assert adjusted == [
            Decimal("93.0"),
            Decimal("92.5"),
            Decimal("92.0"),
            Decimal("91.5"),
            Decimal("91.0"),
            Decimal("90.5"),
        ]
