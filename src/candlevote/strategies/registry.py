"""Strategy registry: static metadata for every rule and the active panel.

The registry is an immutable tuple built once at startup and passed to the
panel evaluator. Rules never look up their own metadata; the evaluator hands
each definition's best hour/day to the confidence adjuster explicitly.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from candlevote.strategies import sequence, shape, structure
from candlevote.strategies.primitives import Rule


@dataclass(frozen=True)
class StrategyDefinition:
    """Static descriptor of one strategy.

    ``win_rate`` is a historical percentage kept for display and weighting
    metadata; nothing in the engine updates it from outcomes.
    """

    id: str
    name: str
    description: str
    win_rate: Decimal
    best_hour: int  # 0-23
    best_day: int  # 0 = Sunday ... 6 = Saturday
    rule: Rule

    def __post_init__(self) -> None:
        if not 0 <= self.best_hour <= 23:
            raise ValueError(f"best_hour must be in 0-23, got {self.best_hour}")
        if not 0 <= self.best_day <= 6:
            raise ValueError(f"best_day must be in 0-6, got {self.best_day}")

    @property
    def min_candles(self) -> int:
        """Shortest window the rule evaluates; shorter windows abstain."""
        return getattr(self.rule, "min_candles", 1)


ALL_STRATEGIES: tuple[StrategyDefinition, ...] = (
    StrategyDefinition(
        id="engulfing",
        name="Single-Color Engulfing",
        description="Large candle engulfing the previous one while keeping its color",
        win_rate=Decimal("92.9"),
        best_hour=8,
        best_day=6,
        rule=shape.engulfing,
    ),
    StrategyDefinition(
        id="three_white_soldiers",
        name="Three White Soldiers",
        description="Three strong consecutive green candles",
        win_rate=Decimal("92.0"),
        best_hour=14,
        best_day=3,
        rule=shape.three_white_soldiers,
    ),
    StrategyDefinition(
        id="strong_candle",
        name="Strong Candle",
        description="Candle with a large body and short wicks",
        win_rate=Decimal("90.9"),
        best_hour=13,
        best_day=5,
        rule=shape.strong_candle,
    ),
    StrategyDefinition(
        id="three_valleys_peaks",
        name="Three Valleys/Peaks",
        description="Three ascending lows or three descending highs",
        win_rate=Decimal("85.7"),
        best_hour=12,
        best_day=3,
        rule=structure.three_valleys_peaks,
    ),
    StrategyDefinition(
        id="mhi",
        name="MHI",
        description="Enter the opposite color when 2+ of the last 3 candles share a color",
        win_rate=Decimal("85.0"),
        best_hour=10,
        best_day=1,
        rule=sequence.mhi,
    ),
    StrategyDefinition(
        id="doji_reversal",
        name="Post-Doji Reversal",
        description="Enter against the candle that follows a doji",
        win_rate=Decimal("84.2"),
        best_hour=9,
        best_day=2,
        rule=shape.doji_reversal,
    ),
    StrategyDefinition(
        id="minority",
        name="Minority",
        description="Side with the minority color of the last 3 candles",
        win_rate=Decimal("80.0"),
        best_hour=15,
        best_day=4,
        rule=sequence.minority,
    ),
    StrategyDefinition(
        id="first_candle_quadrant",
        name="First Candle of Quadrant",
        description="Follow a strong candle opening a 15-minute quadrant",
        win_rate=Decimal("75.0"),
        best_hour=11,
        best_day=2,
        rule=shape.first_candle_quadrant,
    ),
    StrategyDefinition(
        id="color_alternation",
        name="Color Alternation",
        description="Continue a green/red/green or red/green/red alternation",
        win_rate=Decimal("72.2"),
        best_hour=16,
        best_day=4,
        rule=sequence.color_alternation,
    ),
    StrategyDefinition(
        id="odd_sequence",
        name="Odd Sequence",
        description="Enter against a run of three same-colored candles",
        win_rate=Decimal("71.4"),
        best_hour=9,
        best_day=1,
        rule=sequence.odd_sequence,
    ),
)

_BY_ID: dict[str, StrategyDefinition] = {s.id: s for s in ALL_STRATEGIES}


def get_strategy(strategy_id: str) -> StrategyDefinition:
    """Look up a definition by id. Raises KeyError for unknown ids."""
    try:
        return _BY_ID[strategy_id]
    except KeyError:
        raise KeyError(
            f"Unknown strategy '{strategy_id}'. Known: {', '.join(_BY_ID)}"
        ) from None


def build_panel(strategy_ids: Iterable[str]) -> tuple[StrategyDefinition, ...]:
    """Build the ordered, immutable active panel from strategy ids.

    Order follows ``strategy_ids``. Duplicates are rejected so that one
    strategy can never vote twice for the same candle.
    """
    ids = list(strategy_ids)
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate strategy ids in panel: {ids}")
    return tuple(get_strategy(sid) for sid in ids)
