"""
WebSocket client for the peer relay.

Connects to a PeerRelayServer, learns the id the server assigned, and
exposes relayed messages through an asyncio queue and an optional callback.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

import websockets.exceptions
from websockets.asyncio.client import connect, ClientConnection

from peer_relay.core.types import (
    FIELD_DATA,
    FIELD_TARGET,
    FIELD_TYPE,
    WS_MSG_PING,
)
from peer_relay.infrastructure.exceptions import WebSocketError

from .process_messages import ControlMessageHandler


class RelayClient:
    """
    Relay peer speaking the server's JSON frame protocol.

    Relayed messages land in ``inbox`` (and are passed to
    ``message_callback`` if one is given). Control frames update
    ``client_id`` and ``roster``.
    """

    def __init__(
        self,
        server_url: str,
        logger: Optional[logging.Logger] = None,
        message_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        auto_reconnect: bool = False,
        registration_timeout: float = 10.0,
    ) -> None:
        """
        Initialize the relay client.

        Args:
            server_url: WebSocket server URL
            logger: Logger instance, defaults to this module's logger
            message_callback: Called with every relayed message
            auto_reconnect: Reconnect with exponential backoff when the
                server drops the connection
            registration_timeout: Seconds to wait for the server to assign an id
        """
        if not server_url:
            raise ValueError("server_url cannot be empty")
        if not server_url.startswith(("ws://", "wss://")):
            raise ValueError("server_url must start with 'ws://' or 'wss://'")

        self.server_url: str = server_url
        self.logger: logging.Logger = logger or logging.getLogger(__name__)
        self.message_callback = message_callback
        self.registration_timeout = registration_timeout

        self.websocket: Optional[ClientConnection] = None
        self.is_connected: bool = False
        self.inbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

        self.control_handler = ControlMessageHandler(self.logger)

        self._connection_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._should_reconnect: bool = auto_reconnect

        self._messages_sent: int = 0
        self._messages_received: int = 0
        self._connection_errors: int = 0

    @property
    def client_id(self) -> Optional[str]:
        """Id assigned by the server, None until registered."""
        return self.control_handler.client_id

    @property
    def roster(self):
        """Most recent roster snapshot received from the server."""
        return list(self.control_handler.roster)

    async def connect(self, max_retries: int = 5, retry_delay: float = 1.0) -> bool:
        """
        Connect to the relay server with retry logic.

        Args:
            max_retries: Maximum number of connection attempts
            retry_delay: Initial delay between retries (exponential backoff)

        Returns:
            True once the server has assigned an id, False otherwise
        """
        for attempt in range(max_retries):
            try:
                self.logger.info(
                    f"Connecting to {self.server_url} (attempt {attempt + 1}/{max_retries})"
                )
                self.websocket = await connect(self.server_url, compression=None)

                # Reader must run before the registration frame arrives
                registration = self.control_handler.create_registration_future()
                self._connection_task = asyncio.create_task(self._process_messages())

                await asyncio.wait_for(registration, self.registration_timeout)
                self.is_connected = True
                return True

            except (
                OSError,
                asyncio.TimeoutError,
                websockets.exceptions.InvalidHandshake,
                websockets.exceptions.InvalidURI,
                WebSocketError,
            ) as e:
                self._connection_errors += 1
                self.logger.error(
                    f"Error connecting (attempt {attempt + 1}): {e}",
                    exc_info=True,
                )
                await self._close_socket()
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2

        return False

    async def _process_messages(self) -> None:
        """Process incoming frames from the server."""
        try:
            async for message in self.websocket:
                if isinstance(message, bytes):
                    self.logger.warning(f"[{self.client_id}] Ignoring binary frame")
                    continue
                try:
                    data = json.loads(message)
                except json.JSONDecodeError as e:
                    self.logger.error(f"[{self.client_id}] Invalid frame: {e}")
                    continue
                if not isinstance(data, dict):
                    continue

                if not self.control_handler.process_control_message(data):
                    self._deliver(data)
        except websockets.exceptions.ConnectionClosed:
            self.logger.info(f"[{self.client_id}] Connection closed by server")
        finally:
            self.is_connected = False

            # Attempts that never registered are retried by connect()
            if (
                self._should_reconnect
                and self.control_handler.is_registered
                and not self._reconnect_task
            ):
                self._reconnect_task = asyncio.create_task(self._handle_reconnection())

    def _deliver(self, data: Dict[str, Any]) -> None:
        self._messages_received += 1
        self.inbox.put_nowait(data)
        if self.message_callback:
            self.message_callback(data)

    async def send(
        self, kind: str, data: Any = None, target: Optional[str] = None
    ) -> None:
        """
        Send a message for the server to relay.

        Args:
            kind: Message type, e.g. ``message``, ``signal`` or ``update``
            data: JSON-serializable payload
            target: Peer id to relay to (targeted mode)

        Raises:
            WebSocketError: If the client is not connected
        """
        frame: Dict[str, Any] = {FIELD_TYPE: kind, FIELD_DATA: data}
        if target is not None:
            frame[FIELD_TARGET] = target
        await self._send_frame(frame)
        self._messages_sent += 1

    async def ping(self, timestamp: Optional[float] = None) -> None:
        """Send an application-level ping; the pong lands in ``control_handler``."""
        await self._send_frame({FIELD_TYPE: WS_MSG_PING, "timestamp": timestamp})

    async def _send_frame(self, frame: Dict[str, Any]) -> None:
        if not self.is_connected or not self.websocket:
            raise WebSocketError("Cannot send, client is not connected")
        try:
            await self.websocket.send(json.dumps(frame))
        except websockets.exceptions.ConnectionClosed as e:
            self.is_connected = False
            raise WebSocketError(f"Connection closed while sending: {e}") from e

    async def receive(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Wait for the next relayed message."""
        return await asyncio.wait_for(self.inbox.get(), timeout)

    async def _handle_reconnection(self) -> None:
        """Handle automatic reconnection with exponential backoff."""
        base_delay = 1.0
        max_delay = 60.0
        retry_count = 0

        try:
            while self._should_reconnect:
                retry_count += 1
                delay = min(base_delay * (2 ** (retry_count - 1)), max_delay)

                self.logger.info(
                    f"Attempting reconnection #{retry_count} in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

                if await self.connect(max_retries=1):
                    self.logger.info(
                        f"Reconnected as {self.client_id} after {retry_count} attempts"
                    )
                    return
        finally:
            self._reconnect_task = None

    async def _close_socket(self) -> None:
        if self._connection_task:
            self._connection_task.cancel()
            try:
                await self._connection_task
            except asyncio.CancelledError:
                pass
            self._connection_task = None

        if self.websocket:
            await self.websocket.close()
            self.websocket = None
        self.is_connected = False

    async def disconnect(self) -> None:
        """Disconnect from the relay server."""
        self._should_reconnect = False

        if self._reconnect_task:
            self._reconnect_task.cancel()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass
            self._reconnect_task = None

        await self._close_socket()
        self.logger.info(f"[{self.client_id}] Disconnected from server")

    def get_status(self) -> Dict[str, Any]:
        """Get client status information."""
        return {
            "client_id": self.client_id,
            "is_connected": self.is_connected,
            "server_url": self.server_url,
            "roster_size": len(self.control_handler.roster),
            "messages_sent": self._messages_sent,
            "messages_received": self._messages_received,
            "connection_errors": self._connection_errors,
            "server_errors": len(self.control_handler.errors),
        }
