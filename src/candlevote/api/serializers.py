"""JSON serialization of store records for the HTTP and WebSocket surfaces."""

from typing import Any

from candlevote.models import Candle, ConsensusAnalysis, StrategyConfig, StrategyPrediction


def candle_to_dict(candle: Candle) -> dict[str, Any]:
    return {
        "id": candle.id,
        "pair": candle.pair,
        "timestamp": candle.timestamp.isoformat(),
        "open": str(candle.open),
        "high": str(candle.high),
        "low": str(candle.low),
        "close": str(candle.close),
        "color": candle.color.value,
    }


def prediction_to_dict(prediction: StrategyPrediction) -> dict[str, Any]:
    return {
        "candle_id": prediction.candle_id,
        "pair": prediction.pair,
        "timestamp": prediction.timestamp.isoformat(),
        "strategy_name": prediction.strategy_name,
        "prediction": prediction.prediction.value,
        "confidence": str(prediction.confidence),
        "reasoning": prediction.reasoning,
    }


def consensus_to_dict(record: ConsensusAnalysis) -> dict[str, Any]:
    return {
        "candle_id": record.candle_id,
        "pair": record.pair,
        "entry_timestamp": record.entry_timestamp.isoformat(),
        "reveal_timestamp": record.reveal_timestamp.isoformat(),
        "total_strategies": record.total_strategies,
        "green_predictions": record.green_votes,
        "red_predictions": record.red_votes,
        "consensus_prediction": (
            record.consensus_prediction.value if record.consensus_prediction else None
        ),
        "consensus_confidence": record.consensus_confidence,
        "actual_color": record.actual_color.value if record.actual_color else None,
        "result": record.result.value if record.result else None,
    }


def strategy_config_to_dict(config: StrategyConfig) -> dict[str, Any]:
    return {
        "id": config.id,
        "name": config.name,
        "description": config.description,
        "enabled": config.enabled,
        "weight": str(config.weight),
        "historical_winrate": str(config.historical_winrate),
    }
