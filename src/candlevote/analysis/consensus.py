"""Consensus aggregation over strategy votes.

Counts green and red votes for one candle and derives a single consensus
color and confidence. Abstentions never reach this module.

Confidence rounding is ROUND_HALF_UP on the percentage (5/8 votes -> 63).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from candlevote.models import Color


class ConsensusState(str, Enum):
    """How the vote ended. TIE and NO_VOTES both persist as a null color."""

    MAJORITY = "majority"
    TIE = "tie"
    NO_VOTES = "no_votes"


@dataclass(frozen=True)
class ConsensusVote:
    """Result of folding the votes of one candle."""

    green_votes: int
    red_votes: int
    prediction: Color | None
    confidence: int  # 0-100
    state: ConsensusState

    @property
    def total(self) -> int:
        return self.green_votes + self.red_votes


def aggregate_votes(predictions: Iterable[Color]) -> ConsensusVote:
    """Fold voting colors into a consensus.

    Formula:
        prediction = green if G > R, red if G < R, None otherwise
        confidence = round(max(G, R) / (G + R) * 100) if G + R > 0 else 0

    Args:
        predictions: Colors of the strategies that voted.

    Returns:
        ConsensusVote with counts, color, confidence and state.
    """
    green = 0
    red = 0
    for color in predictions:
        if color is Color.GREEN:
            green += 1
        elif color is Color.RED:
            red += 1
        else:
            raise ValueError(f"Not a vote: {color!r}")

    total = green + red
    if total == 0:
        return ConsensusVote(0, 0, None, 0, ConsensusState.NO_VOTES)

    confidence = int(
        (Decimal(max(green, red)) / Decimal(total) * 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    )

    if green > red:
        return ConsensusVote(green, red, Color.GREEN, confidence, ConsensusState.MAJORITY)
    if red > green:
        return ConsensusVote(green, red, Color.RED, confidence, ConsensusState.MAJORITY)
    return ConsensusVote(green, red, None, confidence, ConsensusState.TIE)


def reveal_timestamp(entry_timestamp: datetime, bar_interval: timedelta) -> datetime:
    """Instant at which the next candle's color becomes knowable."""
    return entry_timestamp + bar_interval
