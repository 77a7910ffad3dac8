"""
Client-side control message handler.

This module handles control frames (registration, roster, pong, errors)
sent by the relay server. Anything else is a relayed message and is left
for the client to deliver.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from peer_relay.core.types import (
    WS_MSG_CLIENTS,
    WS_MSG_ERROR,
    WS_MSG_PONG,
    WS_MSG_REGISTERED,
)
from peer_relay.infrastructure.exceptions import WebSocketError


class ControlMessageHandler:
    """Tracks registration and roster state for one client."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger: logging.Logger = logger
        self.client_id: Optional[str] = None
        self.roster: List[str] = []
        self.last_pong: Optional[Dict[str, Any]] = None
        self.errors: List[str] = []
        self.registration_future: Optional[asyncio.Future] = None

    @property
    def is_registered(self) -> bool:
        return self.client_id is not None

    def create_registration_future(self) -> asyncio.Future:
        """Create a new future for the registration frame."""
        self.client_id = None
        self.registration_future = asyncio.get_running_loop().create_future()
        return self.registration_future

    def process_control_message(self, data: Dict[str, Any]) -> bool:
        """
        Handle a decoded frame if it is a control frame.

        Returns:
            True if the frame was consumed, False if it is a relayed message
        """
        message_type = data.get("type")
        if message_type == WS_MSG_REGISTERED:
            self._handle_registration(data)
        elif message_type == WS_MSG_CLIENTS:
            self.roster = list(data.get("clients") or [])
            self.logger.debug(f"[{self.client_id}] Roster: {len(self.roster)} peers")
        elif message_type == WS_MSG_PONG:
            self.last_pong = data
        elif message_type == WS_MSG_ERROR:
            self._handle_error_response(data)
        else:
            return False
        return True

    def _handle_registration(self, data: Dict[str, Any]) -> None:
        client_id = data.get("client_id")
        if not client_id:
            self._fail_registration("Registration frame without client_id")
            return

        self.client_id = client_id
        self.logger.info(f"[{client_id}] Registered with server")
        if self.registration_future and not self.registration_future.done():
            self.registration_future.set_result(client_id)

    def _handle_error_response(self, data: Dict[str, Any]) -> None:
        """Handle error response from server."""
        error_msg = data.get("message", "Unknown error")
        self.errors.append(error_msg)
        self.logger.warning(f"[{self.client_id}] Server error: {error_msg}")

        if not self.is_registered:
            self._fail_registration(error_msg)

    def _fail_registration(self, reason: str) -> None:
        self.logger.error(f"Registration failed: {reason}")
        if self.registration_future and not self.registration_future.done():
            self.registration_future.set_exception(WebSocketError(reason))
