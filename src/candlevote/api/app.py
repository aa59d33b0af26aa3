"""FastAPI application factory with JSON routes and the consensus WebSocket hub."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from candlevote.api.routes import api, ws
from candlevote.api.routes.ws import ConsensusHub


def create_app(lifespan: Any = None, hub: ConsensusHub | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.
        hub: WebSocket hub receiving consensus broadcasts. A new one is created
             when omitted.

    Returns:
        Configured FastAPI application. Route handlers expect ``store`` and
        ``analysis_service`` on ``app.state``; main.py's lifespan sets them.
    """
    app = FastAPI(
        title="Candle Consensus",
        lifespan=lifespan,
    )

    app.state.hub = hub if hub is not None else ConsensusHub()

    app.include_router(api.router, prefix="/api")
    app.include_router(ws.router)

    return app
