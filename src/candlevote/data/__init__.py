"""Persistence layer for candles and analysis results.

Provides the SQLite database manager and the typed upsert/query store.
"""

from candlevote.data.database import CandleDatabase
from candlevote.data.store import ResultStore

__all__ = [
    "CandleDatabase",
    "ResultStore",
]
