"""
Custom exceptions for the Peer Relay system.

This module defines all custom exceptions used throughout the system,
providing clear error categorization and handling.
"""


class PeerRelayError(Exception):
    """Base exception for all Peer Relay related errors."""

    pass


class ConfigurationError(PeerRelayError):
    """Raised when there are configuration-related errors."""

    pass


class ValidationError(ConfigurationError):
    """Raised when a configuration value is out of range or not a valid choice."""

    pass


class NetworkError(PeerRelayError):
    """Raised when there are network communication errors."""

    pass


class WebSocketError(NetworkError):
    """Raised when there are WebSocket communication errors."""

    pass


class MalformedMessageError(PeerRelayError):
    """Raised when an inbound frame fails validation at the transport boundary."""

    pass
