"""
WebSocket client for the peer relay.
"""

from .websocket_client import RelayClient

__all__ = [
    "RelayClient",
]
