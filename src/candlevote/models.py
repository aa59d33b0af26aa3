"""Shared data models for the candle consensus engine.

CRITICAL: All prices and confidences use Decimal. Never use float for OHLC values
or confidence scores; rounding of consensus confidence is explicit (ROUND_HALF_UP).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from candlevote.exceptions import InvalidCandleError


class Color(str, Enum):
    """Directional classification of a candle."""

    GREEN = "green"
    RED = "red"

    @property
    def opposite(self) -> Color:
        return Color.RED if self is Color.GREEN else Color.GREEN


class OutcomeResult(str, Enum):
    """Outcome of a consensus once the next candle is revealed.

    Filled in by an external resolver; the engine always writes None.
    """

    WIN = "WIN"
    LOSS = "LOSS"
    PENDING = "PENDING"


@dataclass(frozen=True)
class Candle:
    """One OHLC bar for a currency pair.

    ``timestamp`` must be timezone-aware; it is normalized to UTC.
    ``id`` is assigned by the store when the candle is first persisted.
    """

    pair: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate price coherence and normalize the timestamp."""
        if self.timestamp.tzinfo is None:
            raise InvalidCandleError(f"Candle timestamp must be timezone-aware: {self.timestamp}")
        object.__setattr__(self, "timestamp", self.timestamp.astimezone(timezone.utc))

        for name in ("open", "high", "low", "close"):
            value = getattr(self, name)
            if not value.is_finite():
                raise InvalidCandleError(f"{name} ({value}) must be a finite number")
            if value <= 0:
                raise InvalidCandleError(f"{name} ({value}) must be positive")
        if self.high < max(self.open, self.close):
            raise InvalidCandleError(
                f"High ({self.high}) must be >= max(open={self.open}, close={self.close})"
            )
        if self.low > min(self.open, self.close):
            raise InvalidCandleError(
                f"Low ({self.low}) must be <= min(open={self.open}, close={self.close})"
            )

    @property
    def color(self) -> Color:
        return Color.GREEN if self.close >= self.open else Color.RED

    @property
    def timestamp_ms(self) -> int:
        return int(self.timestamp.timestamp() * 1000)


@dataclass(frozen=True)
class Verdict:
    """Output of one strategy rule for one candle window.

    ``confidence`` is only meaningful when ``prediction`` is not None.
    ``reasoning`` is always present and explains either the match or the abstention.
    """

    prediction: Color | None
    confidence: Decimal
    reasoning: str

    @classmethod
    def abstain(cls, reasoning: str) -> Verdict:
        return cls(prediction=None, confidence=Decimal("0"), reasoning=reasoning)

    @property
    def is_vote(self) -> bool:
        return self.prediction is not None


@dataclass
class StrategyPrediction:
    """A voting verdict bound to a candle and strategy.

    Unique per (candle_id, strategy_name); repeated writes overwrite.
    """

    candle_id: str
    pair: str
    timestamp: datetime  # Entry candle timestamp
    strategy_name: str
    prediction: Color
    confidence: Decimal
    reasoning: str
    created_at: float = field(default_factory=time.time)


@dataclass
class ConsensusAnalysis:
    """Per-candle consensus record. Unique per candle_id."""

    candle_id: str
    pair: str
    entry_timestamp: datetime
    reveal_timestamp: datetime
    total_strategies: int  # Strategies that voted (abstentions excluded)
    green_votes: int
    red_votes: int
    consensus_prediction: Color | None
    consensus_confidence: int
    actual_color: Color | None = None
    result: OutcomeResult | None = None
    created_at: float = field(default_factory=time.time)


@dataclass
class StrategyConfig:
    """Mirror of a strategy definition for external config consumers."""

    id: str
    name: str
    description: str
    enabled: bool
    weight: Decimal  # historical_winrate / 100
    historical_winrate: Decimal
    updated_at: float = field(default_factory=time.time)
