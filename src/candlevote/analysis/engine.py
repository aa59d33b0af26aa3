"""Panel evaluator: runs every strategy definition against one candle window.

Each rule runs in isolation. A rule that raises produces a RuleOutcome
carrying the fault instead of a verdict; the fault is mapped to an abstention
before aggregation, so one broken rule never affects the others.

Evaluation is synchronous and purely in-memory, in panel order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from candlevote.logging import get_logger
from candlevote.models import Candle, Verdict
from candlevote.strategies.registry import StrategyDefinition
from candlevote.strategies.timing import adjust_confidence

logger = get_logger(__name__)

RULE_FAULT_REASONING = "rule execution failed"


@dataclass(frozen=True)
class RuleOutcome:
    """Either the verdict of one rule or the fault that prevented it."""

    strategy: StrategyDefinition
    verdict: Verdict | None = None
    fault: str | None = None

    @property
    def ok(self) -> bool:
        return self.fault is None

    def to_verdict(self) -> Verdict:
        """Verdict for aggregation; faults become abstentions."""
        if self.verdict is not None and self.fault is None:
            return self.verdict
        return Verdict.abstain(f"{RULE_FAULT_REASONING}: {self.fault}")


def evaluate_definition(
    definition: StrategyDefinition,
    window: Sequence[Candle],
    evaluated_at: datetime,
) -> RuleOutcome:
    """Run one rule and season its confidence with the time bonus.

    Args:
        definition: Strategy to run; its best hour/day feed the adjuster.
        window: Oldest-first candles ending at the analyzed candle.
        evaluated_at: Evaluation clock in the configured timezone.

    Returns:
        RuleOutcome with a verdict, or with a fault description if the rule raised
        or returned something that is not a Verdict.
    """
    try:
        verdict = definition.rule(window)
    except Exception as e:
        logger.exception(
            "strategy_rule_failed",
            strategy=definition.id,
            window_size=len(window),
        )
        return RuleOutcome(strategy=definition, fault=f"{type(e).__name__}: {e}")

    if not isinstance(verdict, Verdict):
        logger.error(
            "strategy_rule_bad_result",
            strategy=definition.id,
            result_type=type(verdict).__name__,
        )
        return RuleOutcome(
            strategy=definition,
            fault=f"rule returned {type(verdict).__name__}, expected Verdict",
        )

    if verdict.is_vote:
        verdict = Verdict(
            prediction=verdict.prediction,
            confidence=adjust_confidence(verdict.confidence, definition, evaluated_at),
            reasoning=verdict.reasoning,
        )

    return RuleOutcome(strategy=definition, verdict=verdict)


def evaluate_panel(
    panel: Sequence[StrategyDefinition],
    window: Sequence[Candle],
    evaluated_at: datetime,
) -> list[RuleOutcome]:
    """Evaluate every strategy of ``panel`` in order against ``window``."""
    outcomes: list[RuleOutcome] = []
    for definition in panel:
        outcome = evaluate_definition(definition, window, evaluated_at)
        verdict = outcome.to_verdict()
        logger.debug(
            "strategy_verdict",
            strategy=definition.id,
            prediction=verdict.prediction.value if verdict.prediction else None,
            confidence=str(verdict.confidence),
            reasoning=verdict.reasoning,
        )
        outcomes.append(outcome)
    return outcomes
