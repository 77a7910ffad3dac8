"""
Open WebSocket connections, keyed by peer id.

This is the transport half of the relay: the relay core decides who
receives a payload, the ConnectionManager knows which socket that is.
"""

import json
import logging
from typing import Any, Dict, Optional

from websockets.asyncio.server import ServerConnection, broadcast
from websockets.protocol import State

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Maps peer ids to their WebSocket and delivers outbound payloads."""

    def __init__(self) -> None:
        # Map peer_id -> WebSocket connection
        self.clients: Dict[str, ServerConnection] = {}
        self._frames_sent = 0

    def register(self, peer_id: str, ws: ServerConnection) -> None:
        """Attach a connection to a peer id."""
        self.clients[peer_id] = ws

    def unregister(self, peer_id: str) -> None:
        """Forget a peer's connection."""
        self.clients.pop(peer_id, None)

    def get_client_websocket(self, peer_id: str) -> Optional[ServerConnection]:
        """Get WebSocket for a peer - O(1) lookup."""
        return self.clients.get(peer_id)

    def is_registered(self, peer_id: str) -> bool:
        """Check if a peer has an attached connection."""
        return peer_id in self.clients

    def send(self, peer_id: str, payload: Dict[str, Any]) -> None:
        """
        Queue a JSON frame for one peer without waiting.

        Closed or unknown connections are skipped; ``broadcast`` writes
        synchronously and never suspends the caller.
        """
        websocket = self.clients.get(peer_id)
        if websocket is None:
            logger.debug(f"No connection for peer {peer_id}, frame dropped")
            return
        if websocket.state is not State.OPEN:
            logger.debug(f"Connection for peer {peer_id} is {websocket.state.name}, frame dropped")
            return

        broadcast([websocket], json.dumps(payload))
        self._frames_sent += 1

    def get_stats(self) -> Dict[str, int]:
        """Get connection statistics."""
        return {
            "open_connections": len(self.clients),
            "frames_sent": self._frames_sent,
        }
