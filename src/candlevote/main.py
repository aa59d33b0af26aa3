"""Entry point for the candle consensus service.

Wires all components together and serves the FastAPI app through uvicorn's
programmatic API. Component lifecycle (database connection, strategy config
mirror) runs inside FastAPI's lifespan context manager.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. CandleDatabase (SQLite connection manager)
4. ResultStore (typed upserts/queries)
5. Strategy panel (immutable, from ANALYSIS_ACTIVE_STRATEGIES)
6. ConsensusHub (WebSocket broadcast)
7. AnalysisService (window -> rules -> votes -> consensus)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from candlevote.analysis.service import AnalysisService, init_strategy_configs
from candlevote.api.app import create_app
from candlevote.api.routes.ws import ConsensusHub
from candlevote.api.serializers import consensus_to_dict
from candlevote.config import AppSettings
from candlevote.data.database import CandleDatabase
from candlevote.data.store import ResultStore
from candlevote.logging import get_logger, setup_logging
from candlevote.models import ConsensusAnalysis
from candlevote.strategies.registry import build_panel


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all service components from settings.

    Note: Does NOT connect the database -- that happens in the lifespan.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    database = CandleDatabase(settings.storage.db_path)
    store = ResultStore(database)
    panel = build_panel(settings.analysis.active_strategies)
    hub = ConsensusHub()

    async def _broadcast(record: ConsensusAnalysis) -> None:
        await hub.broadcast(consensus_to_dict(record))

    analysis_service = AnalysisService(
        store=store,
        panel=panel,
        settings=settings.analysis,
        on_consensus=_broadcast,
    )

    return {
        "database": database,
        "store": store,
        "panel": panel,
        "hub": hub,
        "analysis_service": analysis_service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage component lifecycle within the FastAPI application.

    On startup: connects the database, mirrors the strategy panel into the
    config table and stores components on app.state.

    On shutdown: closes the database.
    """
    logger = get_logger("candlevote.main")
    components = app.state.components

    app.state.store = components["store"]
    app.state.analysis_service = components["analysis_service"]

    await components["database"].connect()
    await init_strategy_configs(components["store"], components["panel"])

    logger.info(
        "lifespan_started",
        strategies=[d.id for d in components["panel"]],
    )

    yield

    await components["database"].close()
    logger.info("candlevote_stopped")


async def run() -> None:
    """Run the candle consensus service."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("candlevote.main")

    # 3-7. Build all components
    components = _build_components(settings)

    app = create_app(lifespan=lifespan, hub=components["hub"])
    app.state.settings = settings
    app.state.components = components

    logger.info(
        "starting_api",
        host=settings.api.host,
        port=settings.api.port,
        db_path=settings.storage.db_path,
    )

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
