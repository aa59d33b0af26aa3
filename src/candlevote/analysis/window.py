"""Candle window selection for strategy evaluation."""

from collections.abc import Iterable

from candlevote.models import Candle

#: Maximum candles handed to the strategy rules.
MAX_WINDOW_SIZE = 20


def build_window(
    target: Candle,
    history: Iterable[Candle],
    max_size: int = MAX_WINDOW_SIZE,
) -> tuple[Candle, ...]:
    """Select the oldest-first window ending at ``target``.

    Keeps candles of the target's pair with timestamp <= target timestamp,
    takes the ``max_size`` most recent (the target always included) and
    returns them sorted ascending. Duplicate timestamps collapse to a single
    candle, the target instance winning for its own timestamp, so timestamps
    in the result are strictly increasing.

    Args:
        target: The candle being analyzed.
        history: Any candles; foreign pairs and future candles are ignored.
        max_size: Window cap (>= 1).

    Returns:
        Tuple of 1..max_size candles, oldest first, last element is ``target``.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")

    by_timestamp: dict = {}
    for candle in history:
        if candle.pair != target.pair or candle.timestamp > target.timestamp:
            continue
        by_timestamp[candle.timestamp] = candle
    by_timestamp[target.timestamp] = target

    newest_first = sorted(by_timestamp.values(), key=lambda c: c.timestamp, reverse=True)
    return tuple(reversed(newest_first[:max_size]))
