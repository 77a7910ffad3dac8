"""
Relay core: peer registry plus message routing.

The core is transport agnostic. A transport feeds it ``Connect``,
``Message`` and ``Disconnect`` events through :meth:`RelayCore.handle`
and receives outbound payloads through its ``send`` method. Handlers run
to completion without awaiting anything.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .policies import BroadcastPolicy, TargetedRelayPolicy, policy_for
from .registry import PeerRegistry
from .transport import Transport
from .types import (
    FIELD_DATA,
    FIELD_FROM,
    FIELD_TARGET,
    FIELD_TYPE,
    WS_MSG_CLIENTS,
    Connect,
    Disconnect,
    Message,
)

logger = logging.getLogger(__name__)


class RelayCore:
    """Owns the peer registry and routes messages between peers."""

    def __init__(
        self,
        transport: Transport,
        policy=None,
        roster_on_connect: bool = False,
        roster_on_disconnect: bool = False,
        attribute_fields: Sequence[str] = (),
        registry: Optional[PeerRegistry] = None,
    ) -> None:
        """
        Initialize the relay core.

        Args:
            transport: Delivers outbound payloads
            policy: BroadcastPolicy or TargetedRelayPolicy, defaults to broadcast
                without echo
            roster_on_connect: Send the roster to every peer after a connect
            roster_on_disconnect: Send the roster to every peer after a disconnect
            attribute_fields: Payload fields copied into the sender's attributes
                before a message is relayed
            registry: Registry to own, a fresh one if None
        """
        self.transport = transport
        self.policy = policy if policy is not None else BroadcastPolicy()
        self.roster_on_connect = roster_on_connect
        self.roster_on_disconnect = roster_on_disconnect
        self.attribute_fields: Tuple[str, ...] = tuple(attribute_fields)
        self.registry = registry if registry is not None else PeerRegistry()

        self._messages_relayed = 0
        self._messages_dropped = 0

    @classmethod
    def from_config(cls, config, transport: Transport) -> "RelayCore":
        """Build a core from a RelayConfig."""
        return cls(
            transport,
            policy=policy_for(config.routing_mode, include_sender=config.echo),
            roster_on_connect=config.roster_on_connect,
            roster_on_disconnect=config.roster_on_disconnect,
            attribute_fields=config.attribute_fields,
        )

    def handle(self, event) -> None:
        """Dispatch a transport event to its handler."""
        if isinstance(event, Message):
            self.on_message(event)
        elif isinstance(event, Connect):
            self.on_connect(event.peer_id)
        elif isinstance(event, Disconnect):
            self.on_disconnect(event.peer_id)
        else:
            raise TypeError(f"Unsupported relay event: {event!r}")

    def on_connect(self, peer_id: str) -> None:
        """Register a peer; a repeated connect resets its attributes."""
        self.registry.register(peer_id)
        logger.info(f"Peer connected: {peer_id} ({len(self.registry)} online)")

        if self.roster_on_connect:
            self._emit_roster()

    def on_disconnect(self, peer_id: str) -> None:
        """Unregister a peer. Unknown ids are ignored."""
        if self.registry.unregister(peer_id):
            logger.info(f"Peer disconnected: {peer_id} ({len(self.registry)} online)")
        else:
            logger.debug(f"Disconnect for unknown peer {peer_id}")

        if self.roster_on_disconnect:
            self._emit_roster()

    def evict(self, peer_id: str) -> None:
        """Explicitly remove a peer, as if its connection had closed."""
        self.on_disconnect(peer_id)

    def on_message(self, message: Message) -> None:
        """Route a message according to the configured policy."""
        recipients = self.policy.recipients(message, self.registry.peer_ids())

        if isinstance(self.policy, TargetedRelayPolicy) and not recipients:
            # Target already left or never existed
            self._messages_dropped += 1
            logger.debug(
                f"Dropped {message.kind!r} from {message.sender_id} "
                f"for absent peer {message.target_id}"
            )
            return

        if self.attribute_fields and isinstance(message.payload, Mapping):
            patch = {
                key: message.payload[key]
                for key in self.attribute_fields
                if key in message.payload
            }
            if patch:
                self.registry.update_attributes(message.sender_id, patch)

        payload = self._relay_payload(message)
        self._send_all(recipients, payload)
        self._messages_relayed += 1

    def update_attributes(self, peer_id: str, patch: Dict[str, Any]) -> bool:
        """Merge ``patch`` into a peer's attributes if the peer is registered."""
        return self.registry.update_attributes(peer_id, patch)

    def get_attributes(self, peer_id: str) -> Optional[Dict[str, Any]]:
        """Get a copy of a peer's attributes, None if it is not registered."""
        return self.registry.get_attributes(peer_id)

    def roster(self) -> List[str]:
        """Point-in-time snapshot of the connected peer ids."""
        return self.registry.peer_ids()

    def shutdown(self) -> None:
        """Forget every peer without notifying anyone."""
        self.registry.clear()
        logger.debug("Relay core registry cleared")

    def _relay_payload(self, message: Message) -> Dict[str, Any]:
        payload = {
            FIELD_TYPE: message.kind,
            FIELD_FROM: message.sender_id,
            FIELD_DATA: message.payload,
        }
        if message.target_id is not None:
            payload[FIELD_TARGET] = message.target_id
        return payload

    def _emit_roster(self) -> None:
        peer_ids = self.registry.peer_ids()
        self._send_all(peer_ids, {FIELD_TYPE: WS_MSG_CLIENTS, "clients": peer_ids})

    def _send_all(self, peer_ids: Iterable[str], payload: Dict[str, Any]) -> None:
        for peer_id in peer_ids:
            try:
                self.transport.send(peer_id, payload)
            except Exception as e:
                # Delivery failures never change who else receives the payload
                logger.warning(f"Send to {peer_id} failed: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get relay statistics."""
        return {
            "policy": repr(self.policy),
            "messages_relayed": self._messages_relayed,
            "messages_dropped": self._messages_dropped,
            "registry_stats": self.registry.get_stats(),
        }
