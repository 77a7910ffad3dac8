"""
Pytest configuration and shared fixtures for the Peer Relay test suite.

This module provides common fixtures and configuration for all tests.
"""

import os
from typing import Any, Dict, List, Tuple

import pytest
from unittest.mock import AsyncMock, MagicMock
from websockets.protocol import State

from peer_relay.core import BroadcastPolicy, RelayCore, TargetedRelayPolicy

RELAY_ENV_VARS = [
    "RELAY_PRESET",
    "RELAY_HOST",
    "RELAY_PORT",
    "PORT",
    "RELAY_MODE",
    "RELAY_ECHO",
    "RELAY_ROSTER_ON_CONNECT",
    "RELAY_ROSTER_ON_DISCONNECT",
    "RELAY_ATTRIBUTE_FIELDS",
    "RELAY_PING_INTERVAL",
    "RELAY_MAX_CONNECTIONS",
    "RELAY_MAX_MESSAGE_SIZE",
    "LOG_LEVEL",
]


class RecordingTransport:
    """Transport double that records every send."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, Dict[str, Any]]] = []

    def send(self, peer_id: str, payload: Dict[str, Any]) -> None:
        self.sent.append((peer_id, payload))

    def sent_to(self, peer_id: str) -> List[Dict[str, Any]]:
        return [payload for pid, payload in self.sent if pid == peer_id]

    def recipients(self) -> List[str]:
        return [pid for pid, _ in self.sent]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def transport():
    """Create a recording transport."""
    return RecordingTransport()


@pytest.fixture
def broadcast_core(transport):
    """Relay core broadcasting to everyone except the sender."""
    return RelayCore(transport, policy=BroadcastPolicy(include_sender=False))


@pytest.fixture
def echo_core(transport):
    """Relay core broadcasting to everyone including the sender (chat)."""
    return RelayCore(transport, policy=BroadcastPolicy(include_sender=True))


@pytest.fixture
def targeted_core(transport):
    """Relay core delivering only to the named target."""
    return RelayCore(transport, policy=TargetedRelayPolicy())


@pytest.fixture
def mock_websocket():
    """Create a mock WebSocket connection for testing."""
    websocket = MagicMock()
    websocket.remote_address = ("127.0.0.1", 12345)
    websocket.state = State.OPEN
    websocket.send = AsyncMock()
    websocket.close = AsyncMock()
    websocket.ping = AsyncMock()
    return websocket


@pytest.fixture
def clean_env(monkeypatch):
    """Remove relay environment variables for the duration of a test."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
    # load_dotenv writes straight into os.environ
    for name in RELAY_ENV_VARS:
        os.environ.pop(name, None)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
