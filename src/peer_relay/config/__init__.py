"""
Configuration management for the Peer Relay system.

This package provides:
- The RelayConfig data structure and its validation
- Named presets for the chat, signal and position relays
- Environment variable and .env loading
"""

from .settings import (
    RelayConfig,
    RelayConfigManager,
    PRESETS,
    PRESET_CHAT,
    PRESET_SIGNAL,
    PRESET_POSITION,
)

__all__ = [
    "RelayConfig",
    "RelayConfigManager",
    "PRESETS",
    "PRESET_CHAT",
    "PRESET_SIGNAL",
    "PRESET_POSITION",
]
