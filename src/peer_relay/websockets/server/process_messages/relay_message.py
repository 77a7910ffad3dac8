"""
Inbound relay frames for the WebSocket relay server.

Frames are validated here, at the transport boundary, so the relay core
only ever receives well-formed Message values.
"""

import json
import logging
from typing import Any, Dict

from websockets.asyncio.server import ServerConnection

from peer_relay.core import Message, RelayCore
from peer_relay.core.types import (
    FIELD_DATA,
    FIELD_TARGET,
    FIELD_TYPE,
    RESERVED_KINDS,
    WS_MSG_PING,
)
from peer_relay.infrastructure.exceptions import MalformedMessageError

from .control_message import ControlMessageHandler


def decode_frame(raw: str) -> Dict[str, Any]:
    """
    Decode a text frame into a JSON object with a string ``type``.

    Raises:
        MalformedMessageError: If the frame is not such an object
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(f"Invalid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise MalformedMessageError("Frame must be a JSON object")

    kind = data.get(FIELD_TYPE)
    if not isinstance(kind, str) or not kind:
        raise MalformedMessageError("Missing message type")

    return data


def build_message(
    sender_id: str, data: Dict[str, Any], require_target: bool
) -> Message:
    """
    Turn a decoded frame into a relay Message.

    Args:
        sender_id: Peer id of the connection the frame arrived on
        data: Output of :func:`decode_frame`
        require_target: Whether the relay runs in targeted mode

    Raises:
        MalformedMessageError: If the frame cannot be relayed
    """
    kind = data[FIELD_TYPE]
    if kind in RESERVED_KINDS:
        raise MalformedMessageError(f"Message type {kind!r} is reserved")

    target = data.get(FIELD_TARGET)
    if target is not None and (not isinstance(target, str) or not target):
        raise MalformedMessageError("Target must be a non-empty string")
    if require_target and target is None:
        raise MalformedMessageError(f"Message type {kind!r} requires a target")

    return Message(
        sender_id=sender_id,
        kind=kind,
        payload=data.get(FIELD_DATA),
        target_id=target if require_target else None,
    )


class RelayMessageHandler:
    """Validates text frames and feeds them to the relay core."""

    def __init__(
        self,
        core: RelayCore,
        control_handler: ControlMessageHandler,
        require_target: bool,
        logger: logging.Logger,
    ) -> None:
        self.core = core
        self.control_handler = control_handler
        self.require_target = require_target
        self.logger = logger

    async def process_message(
        self, peer_id: str, websocket: ServerConnection, message: str
    ) -> None:
        """Process one text frame from ``peer_id``."""
        try:
            data = decode_frame(message)
            if data[FIELD_TYPE] == WS_MSG_PING:
                await self.control_handler.handle_ping(websocket, data)
                return

            relay_message = build_message(peer_id, data, self.require_target)
        except MalformedMessageError as e:
            self.logger.warning(f"Rejected frame from {peer_id}: {e}")
            await self.control_handler.send_error(websocket, str(e))
            return

        self.core.handle(relay_message)
