"""Shared test fixtures for the candle consensus engine.

Candle factories use Decimal prices (project convention). Windows start at
10:01 UTC so no candle falls on a 15-minute quadrant boundary unless a test
asks for it explicitly.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from candlevote.config import AnalysisSettings, AppSettings, StorageSettings
from candlevote.models import Candle

BASE_TIME = datetime(2025, 1, 6, 10, 1, tzinfo=timezone.utc)  # Monday

#: (open, high, low, close) offsets from 1.1000 for each candle shape.
#: strong: body = 90% of range; weak: body = 50%; doji: body = 5%.
_SHAPES: dict[tuple[str, str], tuple[str, str, str, str]] = {
    ("green", "strong"): ("1.1000", "1.1010", "1.1000", "1.1009"),
    ("red", "strong"): ("1.1009", "1.1010", "1.1000", "1.1000"),
    ("green", "weak"): ("1.1000", "1.1010", "1.1000", "1.1005"),
    ("red", "weak"): ("1.1005", "1.1010", "1.1000", "1.1000"),
    ("green", "doji"): ("1.1000", "1.1010", "1.1000", "1.10005"),
    ("red", "doji"): ("1.10005", "1.1010", "1.1000", "1.1000"),
}

CandleFactory = Callable[..., Candle]


def build_candle(
    open_: str,
    high: str,
    low: str,
    close: str,
    index: int = 0,
    pair: str = "EUR/USD",
    timestamp: datetime | None = None,
    candle_id: str | None = None,
) -> Candle:
    return Candle(
        id=candle_id,
        pair=pair,
        timestamp=timestamp or BASE_TIME + timedelta(minutes=index),
        open=Decimal(open_),
        high=Decimal(high),
        low=Decimal(low),
        close=Decimal(close),
    )


@pytest.fixture
def make_candle() -> CandleFactory:
    """Factory: make_candle(open, high, low, close, index=0, pair=..., timestamp=...)."""
    return build_candle


@pytest.fixture
def shaped_candle() -> CandleFactory:
    """Factory: shaped_candle("green", "strong", index=0, ...)."""

    def _factory(color: str, shape: str = "strong", **kwargs) -> Candle:  # type: ignore[no-untyped-def]
        return build_candle(*_SHAPES[(color, shape)], **kwargs)

    return _factory


@pytest.fixture
def colored_window(shaped_candle: CandleFactory) -> Callable[..., tuple[Candle, ...]]:
    """Factory: colored_window(["green", "red"], shape="strong") -> oldest-first window."""

    def _factory(colors: list[str], shape: str = "strong") -> tuple[Candle, ...]:
        return tuple(shaped_candle(color, shape, index=i) for i, color in enumerate(colors))

    return _factory


@pytest.fixture
def analysis_settings() -> AnalysisSettings:
    return AnalysisSettings(window_size=20, bar_interval_seconds=60, timezone="UTC")


@pytest.fixture
def mock_settings(tmp_path) -> AppSettings:  # type: ignore[no-untyped-def]
    """Return AppSettings with test defaults (temporary database, DEBUG logs)."""
    return AppSettings(
        log_level="DEBUG",
        analysis=AnalysisSettings(),
        storage=StorageSettings(db_path=str(tmp_path / "candlevote.db")),
    )
