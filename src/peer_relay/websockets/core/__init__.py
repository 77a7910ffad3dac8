"""
Connection bookkeeping shared by the WebSocket server components.
"""

from .connection_manager import ConnectionManager

__all__ = [
    "ConnectionManager",
]
