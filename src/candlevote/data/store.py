"""Typed SQLite read/write abstraction for candles and analysis results.

Provides ResultStore with typed methods for upserting and querying candles,
per-strategy predictions, per-candle consensus records and the strategy
config mirror. All SQL is isolated behind this interface.

CRITICAL: All price/confidence values stored as TEXT in SQLite, restored as Decimal on read.
Every write is an idempotent upsert on the table's unique key.
"""

import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from candlevote.data.database import CandleDatabase
from candlevote.logging import get_logger
from candlevote.models import (
    Candle,
    Color,
    ConsensusAnalysis,
    OutcomeResult,
    StrategyConfig,
    StrategyPrediction,
)

logger = get_logger(__name__)

_CANDLE_COLUMNS = "id, pair, timestamp_ms, open, high, low, close"

_CONSENSUS_COLUMNS = (
    "candle_id, pair, entry_timestamp_ms, reveal_timestamp_ms, total_strategies, "
    "green_predictions, red_predictions, consensus_prediction, consensus_confidence, "
    "actual_color, result, created_at"
)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _row_to_candle(row) -> Candle:  # type: ignore[no-untyped-def]
    return Candle(
        id=row[0],
        pair=row[1],
        timestamp=_from_ms(row[2]),
        open=Decimal(row[3]),
        high=Decimal(row[4]),
        low=Decimal(row[5]),
        close=Decimal(row[6]),
    )


def _row_to_consensus(row) -> ConsensusAnalysis:  # type: ignore[no-untyped-def]
    return ConsensusAnalysis(
        candle_id=row[0],
        pair=row[1],
        entry_timestamp=_from_ms(row[2]),
        reveal_timestamp=_from_ms(row[3]),
        total_strategies=row[4],
        green_votes=row[5],
        red_votes=row[6],
        consensus_prediction=Color(row[7]) if row[7] else None,
        consensus_confidence=row[8],
        actual_color=Color(row[9]) if row[9] else None,
        result=OutcomeResult(row[10]) if row[10] else None,
        created_at=row[11] / 1000,
    )


class ResultStore:
    """Async SQLite store for candles, strategy predictions and consensus records.

    Wraps CandleDatabase with typed read/write methods. All SQL access
    goes through self._database.db (the aiosqlite Connection).

    Usage:
        async with CandleDatabase("data/candlevote.db") as database:
            store = ResultStore(database)
            candle = await store.upsert_candle(candle)
    """

    def __init__(self, database: CandleDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Candles
    # ──────────────────────────────────────────────

    async def upsert_candle(self, candle: Candle) -> Candle:
        """Insert or update a candle keyed by (pair, timestamp).

        An existing row keeps its id; its OHLC values are overwritten.
        Returns the stored candle with its id.
        """
        db = self._database.db
        timestamp_ms = candle.timestamp_ms
        await db.execute(
            "INSERT INTO candles "
            "(id, pair, timestamp_ms, open, high, low, close, color, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(pair, timestamp_ms) DO UPDATE SET "
            "open = excluded.open, high = excluded.high, low = excluded.low, "
            "close = excluded.close, color = excluded.color",
            (
                candle.id or str(uuid.uuid4()),
                candle.pair,
                timestamp_ms,
                str(candle.open),
                str(candle.high),
                str(candle.low),
                str(candle.close),
                candle.color.value,
                int(time.time() * 1000),
            ),
        )
        await db.commit()

        cursor = await db.execute(
            f"SELECT {_CANDLE_COLUMNS} FROM candles WHERE pair = ? AND timestamp_ms = ?",
            (candle.pair, timestamp_ms),
        )
        stored = _row_to_candle(await cursor.fetchone())
        logger.debug("candle_upserted", candle_id=stored.id, pair=stored.pair, timestamp_ms=timestamp_ms)
        return stored

    async def get_candle(self, candle_id: str) -> Candle | None:
        cursor = await self._database.db.execute(
            f"SELECT {_CANDLE_COLUMNS} FROM candles WHERE id = ?",
            (candle_id,),
        )
        row = await cursor.fetchone()
        return _row_to_candle(row) if row is not None else None

    async def get_recent_candles(
        self,
        pair: str,
        until: datetime,
        limit: int = 20,
    ) -> list[Candle]:
        """Query the ``limit`` most recent candles of ``pair`` at or before ``until``.

        Returns list of Candle ordered by timestamp ASC.
        """
        cursor = await self._database.db.execute(
            f"SELECT {_CANDLE_COLUMNS} FROM candles "
            "WHERE pair = ? AND timestamp_ms <= ? "
            "ORDER BY timestamp_ms DESC LIMIT ?",
            (pair, _to_ms(until), limit),
        )
        rows = await cursor.fetchall()
        return [_row_to_candle(row) for row in reversed(rows)]

    # ──────────────────────────────────────────────
    # Strategy predictions
    # ──────────────────────────────────────────────

    async def upsert_prediction(self, prediction: StrategyPrediction) -> None:
        """Insert or overwrite the prediction keyed by (candle_id, strategy_name)."""
        await self._database.db.execute(
            "INSERT INTO strategy_predictions "
            "(candle_id, pair, timestamp_ms, strategy_name, prediction, confidence, "
            "reasoning, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(candle_id, strategy_name) DO UPDATE SET "
            "pair = excluded.pair, timestamp_ms = excluded.timestamp_ms, "
            "prediction = excluded.prediction, confidence = excluded.confidence, "
            "reasoning = excluded.reasoning",
            (
                prediction.candle_id,
                prediction.pair,
                _to_ms(prediction.timestamp),
                prediction.strategy_name,
                prediction.prediction.value,
                str(prediction.confidence),
                prediction.reasoning,
                int(prediction.created_at * 1000),
            ),
        )
        await self._database.db.commit()

    async def delete_prediction(self, candle_id: str, strategy_name: str) -> bool:
        """Remove the prediction of one strategy for a candle. Returns True if a row went away."""
        cursor = await self._database.db.execute(
            "DELETE FROM strategy_predictions WHERE candle_id = ? AND strategy_name = ?",
            (candle_id, strategy_name),
        )
        await self._database.db.commit()
        return cursor.rowcount > 0

    async def get_predictions(self, candle_id: str) -> list[StrategyPrediction]:
        """Query all predictions for a candle, ordered by strategy name."""
        cursor = await self._database.db.execute(
            "SELECT candle_id, pair, timestamp_ms, strategy_name, prediction, "
            "confidence, reasoning, created_at "
            "FROM strategy_predictions WHERE candle_id = ? ORDER BY strategy_name",
            (candle_id,),
        )
        rows = await cursor.fetchall()
        return [
            StrategyPrediction(
                candle_id=row[0],
                pair=row[1],
                timestamp=_from_ms(row[2]),
                strategy_name=row[3],
                prediction=Color(row[4]),
                confidence=Decimal(row[5]),
                reasoning=row[6],
                created_at=row[7] / 1000,
            )
            for row in rows
        ]

    # ──────────────────────────────────────────────
    # Consensus
    # ──────────────────────────────────────────────

    async def upsert_consensus(self, record: ConsensusAnalysis) -> None:
        """Insert or overwrite the consensus keyed by candle_id.

        Outcome columns (actual_color, result) belong to the external resolver
        and are left untouched when the row already exists, as is created_at.
        A re-analysis therefore does not reset them to the null values its
        record carries; a plain overwrite would erase a resolved outcome.
        """
        await self._database.db.execute(
            f"INSERT INTO consensus_analysis ({_CONSENSUS_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(candle_id) DO UPDATE SET "
            "pair = excluded.pair, "
            "entry_timestamp_ms = excluded.entry_timestamp_ms, "
            "reveal_timestamp_ms = excluded.reveal_timestamp_ms, "
            "total_strategies = excluded.total_strategies, "
            "green_predictions = excluded.green_predictions, "
            "red_predictions = excluded.red_predictions, "
            "consensus_prediction = excluded.consensus_prediction, "
            "consensus_confidence = excluded.consensus_confidence",
            (
                record.candle_id,
                record.pair,
                _to_ms(record.entry_timestamp),
                _to_ms(record.reveal_timestamp),
                record.total_strategies,
                record.green_votes,
                record.red_votes,
                record.consensus_prediction.value if record.consensus_prediction else None,
                record.consensus_confidence,
                record.actual_color.value if record.actual_color else None,
                record.result.value if record.result else None,
                int(record.created_at * 1000),
            ),
        )
        await self._database.db.commit()

    async def get_consensus(self, candle_id: str) -> ConsensusAnalysis | None:
        cursor = await self._database.db.execute(
            f"SELECT {_CONSENSUS_COLUMNS} FROM consensus_analysis WHERE candle_id = ?",
            (candle_id,),
        )
        row = await cursor.fetchone()
        return _row_to_consensus(row) if row is not None else None

    async def get_recent_consensus(self, pair: str, limit: int = 20) -> list[ConsensusAnalysis]:
        """Most recent consensus records of a pair, newest first."""
        cursor = await self._database.db.execute(
            f"SELECT {_CONSENSUS_COLUMNS} FROM consensus_analysis "
            "WHERE pair = ? ORDER BY entry_timestamp_ms DESC LIMIT ?",
            (pair, limit),
        )
        rows = await cursor.fetchall()
        return [_row_to_consensus(row) for row in rows]

    # ──────────────────────────────────────────────
    # Strategy config mirror
    # ──────────────────────────────────────────────

    async def upsert_strategy_configs(self, configs: list[StrategyConfig]) -> int:
        """Insert or update strategy config rows keyed by id. Returns rows written."""
        if not configs:
            return 0

        data = [
            (
                c.id,
                c.name,
                c.description,
                1 if c.enabled else 0,
                str(c.weight),
                str(c.historical_winrate),
                int(c.updated_at * 1000),
            )
            for c in configs
        ]
        await self._database.db.executemany(
            "INSERT INTO strategies_config "
            "(id, name, description, enabled, weight, historical_winrate, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET "
            "name = excluded.name, description = excluded.description, "
            "enabled = excluded.enabled, weight = excluded.weight, "
            "historical_winrate = excluded.historical_winrate, "
            "updated_at = excluded.updated_at",
            data,
        )
        await self._database.db.commit()
        logger.debug("strategy_configs_upserted", count=len(data))
        return len(data)

    async def get_strategy_configs(self) -> list[StrategyConfig]:
        cursor = await self._database.db.execute(
            "SELECT id, name, description, enabled, weight, historical_winrate, updated_at "
            "FROM strategies_config ORDER BY id"
        )
        rows = await cursor.fetchall()
        return [
            StrategyConfig(
                id=row[0],
                name=row[1],
                description=row[2] or "",
                enabled=bool(row[3]),
                weight=Decimal(row[4]),
                historical_winrate=Decimal(row[5]) if row[5] else Decimal("0"),
                updated_at=row[6] / 1000,
            )
            for row in rows
        ]
