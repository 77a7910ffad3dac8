"""
WebSocket server implementation for the peer relay.

This module contains the main PeerRelayServer class and related components.
"""

from .relay_server import PeerRelayServer

__all__ = [
    "PeerRelayServer",
]
