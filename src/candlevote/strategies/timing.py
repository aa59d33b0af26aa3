"""Time-of-day / day-of-week confidence seasoning.

Adds a small bounded bonus to a rule's base confidence depending on how close
the evaluation time is to the strategy's historically best hour and weekday.
The bonus never changes a predicted color.

Weekdays use the 0 = Sunday convention of the strategy metadata. Distances
are plain absolute differences with no wrap-around (23h and 0h are 23 apart).

CRITICAL: All computations use Decimal. Never use float.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from candlevote.strategies.registry import StrategyDefinition

MAX_HOUR_BONUS = Decimal("5")
MAX_DAY_BONUS = Decimal("3")
BONUS_DECAY = Decimal("0.5")  # Bonus lost per hour/day of distance
MAX_CONFIDENCE = Decimal("100")


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday of ``moment`` with 0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def _decayed(max_bonus: Decimal, distance: int) -> Decimal:
    if distance == 0:
        return max_bonus
    return max(Decimal("0"), max_bonus - BONUS_DECAY * distance)


def compute_time_bonus(definition: StrategyDefinition, evaluated_at: datetime) -> Decimal:
    """Hour bonus (up to 5) plus weekday bonus (up to 3) for ``definition``.

    Args:
        definition: Strategy carrying best_hour (0-23) and best_day (0-6, Sunday first).
        evaluated_at: Evaluation clock, already in the configured timezone.

    Returns:
        Bonus in [0, 8].
    """
    hour_diff = abs(evaluated_at.hour - definition.best_hour)
    day_diff = abs(sunday_based_weekday(evaluated_at) - definition.best_day)
    return _decayed(MAX_HOUR_BONUS, hour_diff) + _decayed(MAX_DAY_BONUS, day_diff)


def adjust_confidence(
    base_confidence: Decimal,
    definition: StrategyDefinition,
    evaluated_at: datetime,
) -> Decimal:
    """Return ``base_confidence`` plus the time bonus, clamped to 100."""
    return min(MAX_CONFIDENCE, base_confidence + compute_time_bonus(definition, evaluated_at))
