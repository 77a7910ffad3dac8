"""
Peer Relay - connection registry and message relay for real-time peers.

This package keeps a live registry of connected peers and relays their
messages either to everyone (chat style broadcast, optionally echoing to
the sender) or to one named peer (targeted relay, as used for WebRTC
signalling and one-to-one position updates).

Architecture:
- Core: Peer registry, routing policies and the transport-agnostic relay core
- WebSockets: Relay server and client speaking a small JSON frame protocol
- Config: Presets and environment-driven configuration
- Infrastructure: Logging and exceptions
"""

__version__ = "1.0.0"
__author__ = "Peer Relay Team"

# Core components
from .core import (
    RelayCore,
    PeerRegistry,
    BroadcastPolicy,
    TargetedRelayPolicy,
    Connect,
    Disconnect,
    Message,
    Peer,
    RoutingMode,
)

# Networking components
from .websockets.server import PeerRelayServer
from .websockets.client import RelayClient

# Configuration
from .config import RelayConfig, RelayConfigManager

# Infrastructure
from .infrastructure.logging import setup_logging, get_logger
from .infrastructure.exceptions import (
    PeerRelayError,
    ConfigurationError,
    ValidationError,
    NetworkError,
    WebSocketError,
    MalformedMessageError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Core components
    "RelayCore",
    "PeerRegistry",
    "BroadcastPolicy",
    "TargetedRelayPolicy",
    "Connect",
    "Disconnect",
    "Message",
    "Peer",
    "RoutingMode",
    # Networking components
    "PeerRelayServer",
    "RelayClient",
    # Configuration
    "RelayConfig",
    "RelayConfigManager",
    # Infrastructure
    "setup_logging",
    "get_logger",
    "PeerRelayError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "WebSocketError",
    "MalformedMessageError",
]
