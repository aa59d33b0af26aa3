"""Custom exceptions for the candle consensus engine.

Boundary-level failures of an analysis run live here. Rule-level problems
never raise past the panel evaluator; they become abstentions.
"""


class CandleVoteError(Exception):
    """Base exception for all candlevote errors."""


class InvalidCandleError(CandleVoteError, ValueError):
    """Raised when OHLC values violate price coherence."""


class CandleNotFoundError(CandleVoteError):
    """Raised when the candle named by an analysis trigger does not exist."""


class PairMismatchError(CandleVoteError):
    """Raised when a trigger's pair differs from the stored candle's pair."""


class InsufficientHistoryError(CandleVoteError):
    """Raised when no candle window can be obtained for the target candle."""


class ConsensusPersistError(CandleVoteError):
    """Raised when the consensus record for a candle cannot be written."""
