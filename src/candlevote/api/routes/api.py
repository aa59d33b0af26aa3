"""JSON API endpoints: candle ingest, analysis trigger, results and strategy config."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from candlevote.analysis.service import AnalysisService, init_strategy_configs
from candlevote.api.serializers import (
    candle_to_dict,
    consensus_to_dict,
    prediction_to_dict,
    strategy_config_to_dict,
)
from candlevote.data.store import ResultStore
from candlevote.exceptions import (
    CandleNotFoundError,
    ConsensusPersistError,
    InsufficientHistoryError,
    InvalidCandleError,
    PairMismatchError,
)
from candlevote.models import Candle

log = structlog.get_logger(__name__)

router = APIRouter()


def _error(message: str, status_code: int, code: str | None = None) -> JSONResponse:
    content: dict = {"error": message}
    if code is not None:
        content["code"] = code
    return JSONResponse(content=content, status_code=status_code)


async def _json_body(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except Exception:
        return None
    return body if isinstance(body, dict) else None


def _parse_timestamp(value: Any) -> datetime:
    """Accept epoch milliseconds or an ISO-8601 string; naive values are UTC."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp: {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@router.post("/candles")
async def ingest_candle(request: Request) -> JSONResponse:
    """Upsert a candle keyed by (pair, timestamp) and return it with its id.

    Expects JSON body with: pair, timestamp, open, high, low, close.
    Prices may be strings or numbers; strings are preferred to keep precision.
    """
    body = await _json_body(request)
    if body is None:
        return _error("Invalid JSON body", 400)

    for field in ("pair", "timestamp", "open", "high", "low", "close"):
        if body.get(field) in (None, ""):
            return _error(f"Missing required field: {field}", 400)

    store: ResultStore = request.app.state.store
    try:
        candle = Candle(
            pair=str(body["pair"]),
            timestamp=_parse_timestamp(body["timestamp"]),
            open=Decimal(str(body["open"])),
            high=Decimal(str(body["high"])),
            low=Decimal(str(body["low"])),
            close=Decimal(str(body["close"])),
        )
    except InvalidCandleError as e:
        return _error(str(e), 400, "INVALID_CANDLE")
    except (InvalidOperation, ValueError, OverflowError, OSError) as e:
        return _error(f"Malformed candle: {e}", 400, "INVALID_CANDLE")

    stored = await store.upsert_candle(candle)
    log.info("candle_ingested", candle_id=stored.id, pair=stored.pair, color=stored.color.value)
    return JSONResponse(content=candle_to_dict(stored))


@router.post("/analyze")
async def analyze(request: Request) -> JSONResponse:
    """Run the strategy panel for one candle and persist its consensus.

    Expects JSON body with: candleId, pair.
    """
    body = await _json_body(request) or {}
    candle_id = body.get("candleId")
    pair = body.get("pair")
    if not candle_id or not pair:
        return _error("candleId and pair are required", 400)

    service: AnalysisService = request.app.state.analysis_service
    try:
        report = await service.analyze(str(candle_id), str(pair))
    except CandleNotFoundError as e:
        return _error(str(e), 404, "CANDLE_NOT_FOUND")
    except PairMismatchError as e:
        return _error(str(e), 400, "PAIR_MISMATCH")
    except InsufficientHistoryError as e:
        return _error(str(e), 400, "INSUFFICIENT_HISTORY")
    except ConsensusPersistError as e:
        return _error(str(e), 500, "CONSENSUS_NOT_SAVED")

    vote = report.vote
    return JSONResponse(
        content={
            "success": True,
            "predictions": len(report.predictions),
            "consensus": {
                "total": vote.total,
                "green": vote.green_votes,
                "red": vote.red_votes,
                "prediction": vote.prediction.value if vote.prediction else None,
                "confidence": vote.confidence,
                "state": vote.state.value,
            },
        }
    )


@router.get("/consensus/{candle_id}")
async def get_consensus(request: Request, candle_id: str) -> JSONResponse:
    store: ResultStore = request.app.state.store
    record = await store.get_consensus(candle_id)
    if record is None:
        return _error(f"No consensus for candle {candle_id}", 404)
    return JSONResponse(content=consensus_to_dict(record))


@router.get("/consensus")
async def list_consensus(request: Request, pair: str = "EUR/USD", limit: int = 20) -> JSONResponse:
    """Most recent consensus records of a pair, newest first."""
    store: ResultStore = request.app.state.store
    records = await store.get_recent_consensus(pair, limit=max(1, min(limit, 200)))
    return JSONResponse(content=[consensus_to_dict(r) for r in records])


@router.get("/predictions/{candle_id}")
async def get_predictions(request: Request, candle_id: str) -> JSONResponse:
    store: ResultStore = request.app.state.store
    predictions = await store.get_predictions(candle_id)
    return JSONResponse(content=[prediction_to_dict(p) for p in predictions])


@router.post("/init-strategies")
async def init_strategies(request: Request) -> JSONResponse:
    """Mirror the active strategy panel into the strategies_config table."""
    store: ResultStore = request.app.state.store
    service: AnalysisService = request.app.state.analysis_service
    try:
        configs = await init_strategy_configs(store, service.panel)
    except Exception as e:
        log.error("strategy_init_failed", error=str(e))
        return _error(str(e), 500)

    return JSONResponse(
        content={
            "success": True,
            "strategies": [strategy_config_to_dict(c) for c in configs],
            "message": f"{len(configs)} strategies initialized",
        }
    )


@router.get("/strategies")
async def list_strategies(request: Request) -> JSONResponse:
    """Static metadata of the active panel, in evaluation order."""
    service: AnalysisService = request.app.state.analysis_service
    return JSONResponse(
        content=[
            {
                "id": d.id,
                "name": d.name,
                "description": d.description,
                "win_rate": str(d.win_rate),
                "best_hour": d.best_hour,
                "best_day": d.best_day,
            }
            for d in service.panel
        ]
    )
