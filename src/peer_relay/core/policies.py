"""
Routing policies for the relay core.

A policy only decides who receives a message. It is handed a snapshot
of the registered peer ids and never touches the registry itself.
"""

from typing import List, Sequence

from .types import Message, RoutingMode


class BroadcastPolicy:
    """Deliver every message to every registered peer."""

    mode = RoutingMode.BROADCAST

    def __init__(self, include_sender: bool = False) -> None:
        self.include_sender = include_sender

    def recipients(self, message: Message, peer_ids: Sequence[str]) -> List[str]:
        if self.include_sender:
            return list(peer_ids)
        return [peer_id for peer_id in peer_ids if peer_id != message.sender_id]

    def __repr__(self) -> str:
        return f"BroadcastPolicy(include_sender={self.include_sender})"


class TargetedRelayPolicy:
    """Deliver a message only to the peer it names, if that peer is still here."""

    mode = RoutingMode.TARGETED

    def recipients(self, message: Message, peer_ids: Sequence[str]) -> List[str]:
        if message.target_id is None or message.target_id not in peer_ids:
            return []
        return [message.target_id]

    def __repr__(self) -> str:
        return "TargetedRelayPolicy()"


def policy_for(mode: RoutingMode, include_sender: bool = False):
    """Build the policy for a routing mode."""
    if mode is RoutingMode.BROADCAST:
        return BroadcastPolicy(include_sender=include_sender)
    if mode is RoutingMode.TARGETED:
        return TargetedRelayPolicy()
    raise ValueError(f"Unknown routing mode: {mode!r}")
