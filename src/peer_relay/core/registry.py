"""
Peer registry for the relay core.

The registry is the single source of truth for who is online. Every
mutation and every snapshot happens under one re-entrant lock, so readers
always see a consistent point-in-time view even when peer events are
dispatched from several threads.
"""

import threading
from typing import Any, Dict, List, Mapping, Optional

from .types import Peer


class PeerRegistry:
    """Thread-safe mapping of peer id to :class:`Peer`."""

    def __init__(self) -> None:
        self._peers: Dict[str, Peer] = {}
        self._lock = threading.RLock()

    def register(self, peer_id: str) -> None:
        """Register a peer with empty attributes, replacing any previous entry."""
        with self._lock:
            self._peers[peer_id] = Peer(id=peer_id)

    def unregister(self, peer_id: str) -> bool:
        """Remove a peer. Returns False if it was not registered."""
        with self._lock:
            return self._peers.pop(peer_id, None) is not None

    def update_attributes(self, peer_id: str, patch: Mapping[str, Any]) -> bool:
        """Merge ``patch`` into a registered peer's attributes."""
        with self._lock:
            peer = self._peers.get(peer_id)
            if peer is None:
                return False
            peer.attributes.update(patch)
            return True

    def get_attributes(self, peer_id: str) -> Optional[Dict[str, Any]]:
        """Get a copy of a peer's attributes, or None if it is not registered."""
        with self._lock:
            peer = self._peers.get(peer_id)
            return dict(peer.attributes) if peer is not None else None

    def is_registered(self, peer_id: str) -> bool:
        """Check if peer is registered."""
        with self._lock:
            return peer_id in self._peers

    def peer_ids(self) -> List[str]:
        """Snapshot of the registered peer ids, sorted."""
        with self._lock:
            return sorted(self._peers)

    def clear(self) -> None:
        """Drop every peer."""
        with self._lock:
            self._peers.clear()

    def __contains__(self, peer_id: object) -> bool:
        with self._lock:
            return peer_id in self._peers

    def __len__(self) -> int:
        with self._lock:
            return len(self._peers)

    def get_stats(self) -> Dict[str, int]:
        """Get registry statistics."""
        with self._lock:
            return {
                "total_peers": len(self._peers),
                "peers_with_attributes": sum(
                    1 for peer in self._peers.values() if peer.attributes
                ),
            }
