"""
WebSocket relay server.

Each connection becomes a peer with a server-assigned id. Frames are
validated here and passed to the RelayCore, which decides where they go;
the ConnectionManager delivers them.
"""

import asyncio
import uuid
from typing import Any, Dict, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from peer_relay.config import RelayConfig
from peer_relay.core import Connect, RelayCore, RoutingMode
from peer_relay.core.types import WS_MSG_REGISTERED
from peer_relay.infrastructure import setup_logging
from ..core import ConnectionManager
from .process_messages import (
    ControlMessageHandler,
    RelayMessageHandler,
    ConnectionUtils,
)

logger = setup_logging(
    component_name="relay_server",
    log_file="logs/relay_server.log",
)


class PeerRelayServer:
    """WebSocket server that relays messages between connected peers."""

    def __init__(self, config: Optional[RelayConfig] = None) -> None:
        """Initialize the relay server."""
        self.config = config or RelayConfig()
        self.host = self.config.host
        self.port = self.config.port
        self.server: Optional[Server] = None

        self.connections = ConnectionManager()
        self.core = RelayCore.from_config(self.config, self.connections)
        self._connection_semaphore = asyncio.Semaphore(self.config.max_connections)
        self._health_task: Optional[asyncio.Task] = None

        self.control_handler = ControlMessageHandler(logger)
        self.message_handler = RelayMessageHandler(
            self.core,
            self.control_handler,
            require_target=self.config.routing_mode is RoutingMode.TARGETED,
            logger=logger,
        )

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually listened on; differs from ``port`` when that is 0."""
        if not self.server:
            return None
        for sock in self.server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> bool:
        """Start the relay server."""
        try:
            self.server = await serve(
                self._handle_connection,
                self.host,
                self.port,
                ping_interval=None,  # Manual ping handling
                max_size=self.config.max_message_size,
                compression=None,
            )
        except OSError as e:
            logger.error(
                f"Failed to start relay server on {self.host}:{self.port}: {e}",
                exc_info=True,
            )
            return False

        logger.info(
            f"Relay server started on {self.host}:{self.bound_port} "
            f"({self.config.mode} mode)"
        )
        if self.config.ping_interval > 0:
            self._health_task = asyncio.create_task(
                ConnectionUtils.health_monitor(
                    self.connections, self.config.ping_interval, logger
                )
            )
        return True

    async def stop(self) -> None:
        """Stop the relay server."""
        if self._health_task:
            self._health_task.cancel()
            try:
                await self._health_task
            except asyncio.CancelledError:
                pass
            self._health_task = None

        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Relay server stopped")

        self.core.shutdown()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """Handle incoming WebSocket connections."""
        client_address = websocket.remote_address

        async with self._connection_semaphore:
            peer_id = uuid.uuid4().hex
            logger.info(f"New connection from {client_address} as {peer_id}")
            self.connections.register(peer_id, websocket)

            try:
                # No await between these two: the core knows the peer before it can talk
                self.connections.send(
                    peer_id, {"type": WS_MSG_REGISTERED, "client_id": peer_id}
                )
                self.core.handle(Connect(peer_id))

                async for message in websocket:
                    if isinstance(message, str):
                        await self.message_handler.process_message(
                            peer_id, websocket, message
                        )
                    else:
                        await self.control_handler.send_error(
                            websocket, "Binary frames are not supported"
                        )
            except ConnectionClosed:
                logger.info(f"Connection closed: {peer_id}")
            except Exception as e:
                logger.error(
                    f"Error handling connection from {client_address}: {e}",
                    exc_info=True,
                )
            finally:
                await ConnectionUtils.cleanup_connection(
                    self.core, self.connections, peer_id, logger
                )

    def get_stats(self) -> Dict[str, Any]:
        """Get server statistics."""
        return {
            "server_running": self.server is not None,
            "connection_stats": self.connections.get_stats(),
            "relay_stats": self.core.get_stats(),
        }


async def main(config: Optional[RelayConfig] = None) -> None:
    """Run the relay server until cancelled."""
    server = PeerRelayServer(config)

    try:
        if await server.start():
            logger.info("Relay server running. Press Ctrl+C to stop.")
            await asyncio.Future()  # Run forever
    finally:
        await server.stop()
