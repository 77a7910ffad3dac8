"""
Infrastructure components for the Peer Relay system.

This package contains infrastructure concerns including:
- Logging configuration and utilities with production controls
- Custom exception definitions
"""

from .logging import setup_logging, get_logger, LoggingContext
from .logging_manager import LoggingManager, Environment
from .exceptions import (
    PeerRelayError,
    ConfigurationError,
    ValidationError,
    NetworkError,
    WebSocketError,
    MalformedMessageError,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "LoggingContext",
    "LoggingManager",
    "Environment",
    # Exceptions
    "PeerRelayError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "WebSocketError",
    "MalformedMessageError",
]
