"""
Control frames for the WebSocket relay server.

Handles the frames the server answers itself instead of relaying:
ping/pong and error replies.
"""

import json
import logging
from typing import Any, Dict

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

from peer_relay.core.types import (
    WS_MSG_PONG,
    WS_MSG_ERROR,
)


class ControlMessageHandler:
    """Answers control frames on behalf of the server."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    async def handle_ping(
        self, websocket: ServerConnection, data: Dict[str, Any]
    ) -> None:
        """Handle ping messages."""
        await websocket.send(
            json.dumps({"type": WS_MSG_PONG, "timestamp": data.get("timestamp")})
        )

    async def send_error(self, websocket: ServerConnection, message: str) -> None:
        """Send error message to client."""
        try:
            await websocket.send(json.dumps({"type": WS_MSG_ERROR, "message": message}))
        except ConnectionClosed:
            self.logger.debug(f"Could not report error, connection closed: {message}")
