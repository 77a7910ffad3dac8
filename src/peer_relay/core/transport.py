"""
Transport interface consumed by the relay core.
"""

from typing import Any, Dict, Protocol



class Transport(Protocol):
    """
    Delivers outbound payloads to connected peers.

    ``send`` is best effort and must not block: the core calls it while
    handling an event and ignores the outcome.
    """

    def send(self, peer_id: str, payload: Dict[str, Any]) -> None:
        ...
