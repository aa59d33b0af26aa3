"""Async SQLite database manager for candles and analysis results.

Prices and confidences are stored as TEXT so Decimal values round-trip
exactly; timestamps are epoch milliseconds. The unique key of every table is
what keeps re-analysis idempotent; there is no application-level locking.
"""

from pathlib import Path
from typing import Self

import aiosqlite

from candlevote.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS candles (
    id TEXT PRIMARY KEY,
    pair TEXT NOT NULL,
    timestamp_ms INTEGER NOT NULL,
    open TEXT NOT NULL,
    high TEXT NOT NULL,
    low TEXT NOT NULL,
    close TEXT NOT NULL,
    color TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    UNIQUE (pair, timestamp_ms)
);

CREATE TABLE IF NOT EXISTS strategy_predictions (
    candle_id TEXT NOT NULL,
    pair TEXT NOT NULL,
    timestamp_ms INTEGER NOT NULL,
    strategy_name TEXT NOT NULL,
    prediction TEXT NOT NULL,
    confidence TEXT NOT NULL,
    reasoning TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    PRIMARY KEY (candle_id, strategy_name)
);

CREATE TABLE IF NOT EXISTS consensus_analysis (
    candle_id TEXT PRIMARY KEY,
    pair TEXT NOT NULL,
    entry_timestamp_ms INTEGER NOT NULL,
    reveal_timestamp_ms INTEGER NOT NULL,
    total_strategies INTEGER NOT NULL,
    green_predictions INTEGER NOT NULL,
    red_predictions INTEGER NOT NULL,
    consensus_prediction TEXT,
    consensus_confidence INTEGER NOT NULL,
    actual_color TEXT,
    result TEXT,
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS strategies_config (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    enabled INTEGER NOT NULL DEFAULT 1,
    weight TEXT NOT NULL,
    historical_winrate TEXT,
    updated_at INTEGER NOT NULL
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_candles_pair_ts
    ON candles(pair, timestamp_ms);

CREATE INDEX IF NOT EXISTS idx_consensus_pair_ts
    ON consensus_analysis(pair, entry_timestamp_ms);
"""


class CandleDatabase:
    """Owns the single aiosqlite connection of the service.

    ``connect`` opens the file (creating its directory), switches to WAL so the
    API can read while an analysis writes, and applies the schema. Concurrent
    triggers for one candle are serialized by SQLite itself; ``busy_timeout``
    makes the second writer wait instead of failing.

    Usage:
        async with CandleDatabase("data/candlevote.db") as database:
            store = ResultStore(database)
    """

    BUSY_TIMEOUT_MS = 5000

    def __init__(self, db_path: str = "data/candlevote.db") -> None:
        self._db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection. Raises RuntimeError before ``connect``."""
        if self._connection is None:
            raise RuntimeError(f"CandleDatabase({self._db_path}) is not connected")
        return self._connection

    async def connect(self) -> None:
        if self._connection is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = await aiosqlite.connect(self._db_path)
        for pragma in (
            "PRAGMA journal_mode=WAL",
            "PRAGMA synchronous=NORMAL",
            f"PRAGMA busy_timeout={self.BUSY_TIMEOUT_MS}",
        ):
            await connection.execute(pragma)

        await connection.executescript(_CREATE_TABLES_SQL + _CREATE_INDEXES_SQL)
        await connection.execute(
            "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        await connection.commit()

        self._connection = connection
        logger.info("candle_db_connected", db_path=str(self._db_path), schema_version=SCHEMA_VERSION)

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("candle_db_closed", db_path=str(self._db_path))

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
