"""WebSocket feed of persisted consensus records.

Clients connect to ``/ws`` (every pair) or ``/ws?pair=EUR/USD`` (one pair) and
receive one JSON text frame per consensus written by the analysis service.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

log = structlog.get_logger(__name__)

router = APIRouter()


class ConsensusHub:
    """Tracks subscribers and fans consensus payloads out to them.

    Each subscriber maps to the pair it follows, or None for all pairs.
    A subscriber whose send fails is dropped.
    """

    def __init__(self) -> None:
        self.subscribers: dict[WebSocket, str | None] = {}

    async def connect(self, ws: WebSocket, pair: str | None = None) -> None:
        await ws.accept()
        self.subscribers[ws] = pair
        log.info("consensus_ws_connected", pair=pair, total=len(self.subscribers))

    def disconnect(self, ws: WebSocket) -> None:
        self.subscribers.pop(ws, None)
        log.info("consensus_ws_disconnected", total=len(self.subscribers))

    async def broadcast(self, payload: dict[str, Any]) -> int:
        """Send ``payload`` to every subscriber following its pair.

        Returns:
            Number of subscribers the frame was delivered to.
        """
        message = json.dumps(payload)
        pair = payload.get("pair")
        delivered = 0
        for ws, followed in list(self.subscribers.items()):
            if followed is not None and followed != pair:
                continue
            try:
                await ws.send_text(message)
            except Exception as e:
                self.subscribers.pop(ws, None)
                log.warning(
                    "consensus_ws_send_failed",
                    error=str(e),
                    remaining=len(self.subscribers),
                )
                continue
            delivered += 1
        return delivered


@router.websocket("/ws")
async def consensus_feed(websocket: WebSocket, pair: str | None = None) -> None:
    hub: ConsensusHub = websocket.app.state.hub
    await hub.connect(websocket, pair)
    try:
        while True:
            # Incoming frames are ignored; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(websocket)
