"""Candle color consensus engine: a panel of pattern rules voting on the next candle."""

__version__ = "0.1.0"
