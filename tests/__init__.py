"""
Test suite for the Peer Relay system.

This package contains tests organized by type:
- Unit tests for individual components
- Integration tests running the WebSocket server with real clients
- Test fixtures and utilities
"""
