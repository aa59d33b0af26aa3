"""HTTP and WebSocket surface around the analysis service."""

from candlevote.api.app import create_app
from candlevote.api.routes.ws import ConsensusHub

__all__ = [
    "ConsensusHub",
    "create_app",
]
