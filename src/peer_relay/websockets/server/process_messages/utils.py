"""
Utility functions for connection management.

This module provides the cleanup and keepalive helpers used by the
WebSocket relay server.
"""

import asyncio
import logging

from websockets.exceptions import ConnectionClosed

from peer_relay.core import Disconnect, RelayCore

from ...core import ConnectionManager


class ConnectionUtils:
    """Utility functions for connection management."""

    @staticmethod
    async def cleanup_connection(
        core: RelayCore,
        connections: ConnectionManager,
        peer_id: str,
        logger: logging.Logger,
    ) -> None:
        """Clean up when connection is closed."""
        # Detach first so a disconnect roster is not addressed to the closed socket
        connections.unregister(peer_id)
        core.handle(Disconnect(peer_id))
        logger.info(f"Client disconnected: {peer_id}")

    @staticmethod
    async def health_monitor(
        connections: ConnectionManager,
        ping_interval: int,
        logger: logging.Logger,
    ) -> None:
        """Ping every open connection so dead peers surface as closed."""
        while True:
            await asyncio.sleep(ping_interval)

            for peer_id, websocket in list(connections.clients.items()):
                try:
                    await websocket.ping()
                except ConnectionClosed:
                    logger.debug(f"Ping skipped, connection closed: {peer_id}")
