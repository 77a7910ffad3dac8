"""
Core relay logic for the Peer Relay system.

This package contains the transport-independent pieces: the peer
registry, the routing policies and the relay core that ties them together.
"""

from .types import Peer, Connect, Disconnect, Message, RoutingMode
from .registry import PeerRegistry
from .policies import BroadcastPolicy, TargetedRelayPolicy, policy_for
from .transport import Transport
from .relay_core import RelayCore

__all__ = [
    "Peer",
    "Connect",
    "Disconnect",
    "Message",
    "RoutingMode",
    "PeerRegistry",
    "BroadcastPolicy",
    "TargetedRelayPolicy",
    "policy_for",
    "Transport",
    "RelayCore",
]
