"""Candle window selection, panel evaluation and consensus aggregation.

Provides the pure building blocks (window builder, panel evaluator,
consensus aggregator) and the AnalysisService that runs them against the
result store for one candle trigger.
"""

from candlevote.analysis.consensus import (
    ConsensusState,
    ConsensusVote,
    aggregate_votes,
    reveal_timestamp,
)
from candlevote.analysis.engine import RuleOutcome, evaluate_definition, evaluate_panel
from candlevote.analysis.service import (
    AnalysisReport,
    AnalysisService,
    init_strategy_configs,
    strategy_configs,
)
from candlevote.analysis.window import MAX_WINDOW_SIZE, build_window

__all__ = [
    "AnalysisReport",
    "AnalysisService",
    "ConsensusState",
    "ConsensusVote",
    "MAX_WINDOW_SIZE",
    "RuleOutcome",
    "aggregate_votes",
    "build_window",
    "evaluate_definition",
    "evaluate_panel",
    "init_strategy_configs",
    "reveal_timestamp",
    "strategy_configs",
]
