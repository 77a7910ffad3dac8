"""
Common types and constants for the Peer Relay system.

This module centralizes the event types, routing modes and wire-level
message constants so they are not hardcoded throughout the codebase.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Final, FrozenSet, Optional


class RoutingMode(Enum):
    """How the relay core picks the recipients of a message."""

    BROADCAST = "broadcast"
    TARGETED = "targeted"


# WebSocket Message Types
WS_MSG_REGISTERED: Final[str] = "registered"
WS_MSG_CLIENTS: Final[str] = "clients"
WS_MSG_PING: Final[str] = "ping"
WS_MSG_PONG: Final[str] = "pong"
WS_MSG_ERROR: Final[str] = "error"

# Kinds a peer may not relay, since clients read them as control frames
RESERVED_KINDS: Final[FrozenSet[str]] = frozenset(
    {WS_MSG_REGISTERED, WS_MSG_CLIENTS, WS_MSG_PING, WS_MSG_PONG, WS_MSG_ERROR}
)

# Envelope field names
FIELD_TYPE: Final[str] = "type"
FIELD_FROM: Final[str] = "from"
FIELD_TARGET: Final[str] = "target"
FIELD_DATA: Final[str] = "data"

# Default Values
DEFAULT_HOST: Final[str] = "localhost"
DEFAULT_PORT: Final[int] = 8765


@dataclass
class Peer:
    """One connected client and the attributes it has published."""

    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Connect:
    """The transport opened a connection for ``peer_id``."""

    peer_id: str


@dataclass(frozen=True)
class Disconnect:
    """The transport closed the connection for ``peer_id``."""

    peer_id: str


@dataclass(frozen=True)
class Message:
    """
    A well-formed inbound message.

    ``target_id`` is only set for targeted relay. ``payload`` is opaque
    to the core except for attribute extraction.
    """

    sender_id: str
    kind: str
    payload: Any = None
    target_id: Optional[str] = None
