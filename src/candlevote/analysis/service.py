"""Analysis service: runs the full pipeline for one candle trigger.

The AnalysisService is the top-level coordinator that:
1. Loads the target candle and its recent history from the store
2. Builds the oldest-first candle window
3. Evaluates the strategy panel (per-rule fault isolation)
4. Upserts each voting verdict individually
5. Aggregates the successfully persisted votes into a consensus
6. Upserts the consensus record (even when nobody voted)
7. Notifies the optional consensus listener (WebSocket hub)

Re-running for the same candle overwrites rows through their unique keys,
so duplicate or concurrent triggers converge on one logical record.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import structlog

from candlevote.analysis.consensus import (
    ConsensusState,
    ConsensusVote,
    aggregate_votes,
    reveal_timestamp,
)
from candlevote.analysis.engine import RuleOutcome, evaluate_panel
from candlevote.analysis.window import build_window
from candlevote.config import AnalysisSettings
from candlevote.data.store import ResultStore
from candlevote.exceptions import (
    CandleNotFoundError,
    ConsensusPersistError,
    InsufficientHistoryError,
    PairMismatchError,
)
from candlevote.logging import get_logger
from candlevote.models import Candle, ConsensusAnalysis, StrategyConfig, StrategyPrediction
from candlevote.strategies.registry import StrategyDefinition

logger = get_logger(__name__)

ConsensusListener = Callable[[ConsensusAnalysis], Awaitable[None]]


@dataclass
class AnalysisReport:
    """Everything one analysis run produced."""

    candle: Candle
    window_size: int
    outcomes: list[RuleOutcome]
    predictions: list[StrategyPrediction]  # Successfully persisted votes only
    vote: ConsensusVote
    consensus: ConsensusAnalysis

    @property
    def state(self) -> ConsensusState:
        return self.vote.state


class AnalysisService:
    """Runs strategy evaluation and consensus aggregation for stored candles.

    Args:
        store: Candle and result store.
        panel: Ordered, immutable strategy panel.
        settings: Window size, bar interval and evaluation timezone.
        on_consensus: Optional async callback receiving every persisted consensus.
            Listener failures are logged and never fail the analysis.
    """

    def __init__(
        self,
        store: ResultStore,
        panel: Sequence[StrategyDefinition],
        settings: AnalysisSettings,
        on_consensus: ConsensusListener | None = None,
    ) -> None:
        self._store = store
        self._panel = tuple(panel)
        self._settings = settings
        self._tz = ZoneInfo(settings.timezone)
        self._on_consensus = on_consensus

    @property
    def panel(self) -> tuple[StrategyDefinition, ...]:
        return self._panel

    async def analyze(
        self,
        candle_id: str,
        pair: str,
        evaluated_at: datetime | None = None,
    ) -> AnalysisReport:
        """Analyze the candle ``candle_id`` of ``pair``.

        Args:
            candle_id: Id of an already persisted candle.
            pair: Currency pair the trigger refers to.
            evaluated_at: Evaluation clock for the time bonus. Defaults to now.

        Returns:
            AnalysisReport for the run.

        Raises:
            CandleNotFoundError: Unknown candle_id.
            PairMismatchError: Candle belongs to another pair.
            InsufficientHistoryError: Candle history could not be read.
            ConsensusPersistError: The consensus record could not be written.
        """
        clock = (evaluated_at or datetime.now(timezone.utc)).astimezone(self._tz)

        with structlog.contextvars.bound_contextvars(candle_id=candle_id, pair=pair):
            candle = await self._store.get_candle(candle_id)
            if candle is None:
                raise CandleNotFoundError(f"Candle {candle_id} not found")
            if candle.pair != pair:
                raise PairMismatchError(
                    f"Candle {candle_id} belongs to {candle.pair}, not {pair}"
                )

            window = await self._load_window(candle)
            logger.info(
                "analysis_started",
                window_size=len(window),
                strategies=len(self._panel),
                evaluated_at=clock.isoformat(),
            )
            if len(window) < 3:
                logger.warning(
                    "short_candle_window",
                    window_size=len(window),
                    note="Strategies needing more history will abstain",
                )

            outcomes = evaluate_panel(self._panel, window, clock)
            predictions = await self._persist_votes(candle, outcomes)

            vote = aggregate_votes(p.prediction for p in predictions)
            consensus = ConsensusAnalysis(
                candle_id=candle_id,
                pair=pair,
                entry_timestamp=candle.timestamp,
                reveal_timestamp=reveal_timestamp(
                    candle.timestamp,
                    timedelta(seconds=self._settings.bar_interval_seconds),
                ),
                total_strategies=vote.total,
                green_votes=vote.green_votes,
                red_votes=vote.red_votes,
                consensus_prediction=vote.prediction,
                consensus_confidence=vote.confidence,
            )

            if vote.state is ConsensusState.NO_VOTES:
                logger.warning("no_strategy_voted", window_size=len(window))

            try:
                await self._store.upsert_consensus(consensus)
            except Exception as e:
                logger.error("consensus_persist_failed", error=str(e))
                raise ConsensusPersistError(
                    f"Could not save consensus for candle {candle_id}: {e}"
                ) from e

            logger.info(
                "consensus_saved",
                green=vote.green_votes,
                red=vote.red_votes,
                total=vote.total,
                prediction=vote.prediction.value if vote.prediction else None,
                confidence=vote.confidence,
                state=vote.state.value,
            )

            await self._notify(consensus)

        return AnalysisReport(
            candle=candle,
            window_size=len(window),
            outcomes=outcomes,
            predictions=predictions,
            vote=vote,
            consensus=consensus,
        )

    async def _load_window(self, candle: Candle) -> tuple[Candle, ...]:
        try:
            history = await self._store.get_recent_candles(
                candle.pair,
                until=candle.timestamp,
                limit=self._settings.window_size,
            )
        except Exception as e:
            logger.error("candle_history_unavailable", error=str(e))
            raise InsufficientHistoryError(
                f"Could not read history for candle {candle.id}: {e}"
            ) from e
        return build_window(candle, history, max_size=self._settings.window_size)

    async def _persist_votes(
        self,
        candle: Candle,
        outcomes: list[RuleOutcome],
    ) -> list[StrategyPrediction]:
        """Upsert every voting verdict; a failed write only drops that vote.

        Strategies that abstain or fault in this run lose any prediction row a
        previous run left for the candle, so the stored rows always match the
        votes counted in the consensus.
        """
        assert candle.id is not None
        persisted: list[StrategyPrediction] = []
        for outcome in outcomes:
            verdict = outcome.to_verdict()
            if verdict.prediction is None:
                await self._clear_prediction(candle.id, outcome.strategy)
                continue

            prediction = StrategyPrediction(
                candle_id=candle.id,
                pair=candle.pair,
                timestamp=candle.timestamp,
                strategy_name=outcome.strategy.name,
                prediction=verdict.prediction,
                confidence=verdict.confidence,
                reasoning=verdict.reasoning,
            )
            try:
                await self._store.upsert_prediction(prediction)
            except Exception as e:
                logger.error(
                    "strategy_prediction_persist_failed",
                    strategy=outcome.strategy.id,
                    error=str(e),
                )
                await self._clear_prediction(candle.id, outcome.strategy)
                continue
            persisted.append(prediction)
        return persisted

    async def _clear_prediction(self, candle_id: str, definition: StrategyDefinition) -> None:
        try:
            removed = await self._store.delete_prediction(candle_id, definition.name)
        except Exception as e:
            logger.error(
                "strategy_prediction_clear_failed",
                strategy=definition.id,
                error=str(e),
            )
            return
        if removed:
            logger.info("stale_strategy_prediction_removed", strategy=definition.id)

    async def _notify(self, consensus: ConsensusAnalysis) -> None:
        if self._on_consensus is None:
            return
        try:
            await self._on_consensus(consensus)
        except Exception as e:
            logger.warning("consensus_listener_failed", error=str(e))


def strategy_configs(panel: Sequence[StrategyDefinition]) -> list[StrategyConfig]:
    """Build config mirror rows for ``panel`` (weight = win rate / 100)."""
    return [
        StrategyConfig(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            enabled=True,
            weight=definition.win_rate / 100,
            historical_winrate=definition.win_rate,
        )
        for definition in panel
    ]


async def init_strategy_configs(
    store: ResultStore,
    panel: Sequence[StrategyDefinition],
) -> list[StrategyConfig]:
    """Mirror the active panel into the store's strategies_config table.

    The engine never reads these rows back; they exist for external consumers.
    """
    configs = strategy_configs(panel)
    await store.upsert_strategy_configs(configs)
    logger.info("strategy_configs_initialized", count=len(configs))
    return configs
