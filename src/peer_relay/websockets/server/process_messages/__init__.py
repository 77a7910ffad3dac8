"""
Message processing modules for the WebSocket relay server.

This package validates inbound frames and hands them to the relay core.
"""

from .control_message import ControlMessageHandler
from .relay_message import RelayMessageHandler, decode_frame, build_message
from .utils import ConnectionUtils

__all__ = [
    "ControlMessageHandler",
    "RelayMessageHandler",
    "decode_frame",
    "build_message",
    "ConnectionUtils",
]
