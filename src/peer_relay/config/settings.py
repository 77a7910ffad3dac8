"""
Configuration management for the Peer Relay server.

Settings come from a preset (one per relay flavour: chat, signal,
position) and are then overridden by environment variables, optionally
loaded from a ``.env`` file.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from peer_relay.core.types import DEFAULT_HOST, DEFAULT_PORT, RoutingMode
from peer_relay.infrastructure.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

PRESET_CHAT = "chat"
PRESET_SIGNAL = "signal"
PRESET_POSITION = "position"

PRESETS: Dict[str, Dict[str, Any]] = {
    # Every message goes to everyone, sender included
    PRESET_CHAT: {
        "mode": RoutingMode.BROADCAST.value,
        "echo": True,
        "roster_on_connect": False,
        "roster_on_disconnect": False,
        "attribute_fields": (),
    },
    # WebRTC signalling: peers need the roster to pick whom to call
    PRESET_SIGNAL: {
        "mode": RoutingMode.TARGETED.value,
        "echo": False,
        "roster_on_connect": True,
        "roster_on_disconnect": True,
        "attribute_fields": (),
    },
    # One-to-one position updates; the sender's last x/y is remembered
    PRESET_POSITION: {
        "mode": RoutingMode.TARGETED.value,
        "echo": False,
        "roster_on_connect": False,
        "roster_on_disconnect": False,
        "attribute_fields": ("x", "y"),
    },
}

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RelayConfig:
    """Configuration for one relay server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # Routing
    mode: str = RoutingMode.BROADCAST.value
    echo: bool = False
    roster_on_connect: bool = False
    roster_on_disconnect: bool = False
    attribute_fields: Tuple[str, ...] = field(default_factory=tuple)

    # Transport limits
    ping_interval: int = 30
    max_connections: int = 100
    max_message_size: int = 2**20

    log_level: str = "INFO"

    def __post_init__(self):
        """Normalize and validate values."""
        self.attribute_fields = tuple(self.attribute_fields)
        self.log_level = self.log_level.upper()

        valid_modes = [m.value for m in RoutingMode]
        if self.mode not in valid_modes:
            raise ValidationError(
                f"Invalid relay mode {self.mode!r}, expected one of {valid_modes}"
            )
        if not 0 <= self.port <= 65535:
            raise ValidationError(f"Port out of range: {self.port}")
        if self.max_connections < 1:
            raise ValidationError("max_connections must be at least 1")
        if self.max_message_size < 1:
            raise ValidationError("max_message_size must be at least 1")
        if self.ping_interval < 0:
            raise ValidationError("ping_interval cannot be negative")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValidationError(f"Invalid log level: {self.log_level}")

    @property
    def routing_mode(self) -> RoutingMode:
        return RoutingMode(self.mode)

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> "RelayConfig":
        """
        Create a configuration from a named preset.

        Args:
            name: One of ``chat``, ``signal`` or ``position``
            **overrides: Field values that take precedence over the preset

        Raises:
            ConfigurationError: If the preset does not exist
        """
        try:
            values = dict(PRESETS[name])
        except KeyError:
            raise ConfigurationError(
                f"Unknown preset {name!r}, expected one of {sorted(PRESETS)}"
            ) from None
        values.update(overrides)
        return cls(**values)


class RelayConfigManager:
    """Loads a RelayConfig from presets and environment variables."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.debug(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get optional environment variable; empty strings count as unset."""
        value = os.getenv(key)
        return value if value else default

    def _get_int_env(self, key: str) -> Optional[int]:
        value = self._get_optional_env(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None

    def _get_bool_env(self, key: str) -> Optional[bool]:
        value = self._get_optional_env(key)
        if value is None:
            return None
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ConfigurationError(f"{key} must be a boolean, got {value!r}")

    def _get_attribute_fields(self) -> Optional[Tuple[str, ...]]:
        value = os.getenv("RELAY_ATTRIBUTE_FIELDS")
        if value is None:
            return None
        return tuple(part.strip() for part in value.split(",") if part.strip())

    def _collect_overrides(self) -> Dict[str, Any]:
        """Read every supported environment override that is set."""
        port = self._get_int_env("RELAY_PORT")
        if port is None:
            port = self._get_int_env("PORT")

        overrides = {
            "host": self._get_optional_env("RELAY_HOST"),
            "port": port,
            "mode": self._get_optional_env("RELAY_MODE"),
            "echo": self._get_bool_env("RELAY_ECHO"),
            "roster_on_connect": self._get_bool_env("RELAY_ROSTER_ON_CONNECT"),
            "roster_on_disconnect": self._get_bool_env("RELAY_ROSTER_ON_DISCONNECT"),
            "attribute_fields": self._get_attribute_fields(),
            "ping_interval": self._get_int_env("RELAY_PING_INTERVAL"),
            "max_connections": self._get_int_env("RELAY_MAX_CONNECTIONS"),
            "max_message_size": self._get_int_env("RELAY_MAX_MESSAGE_SIZE"),
            "log_level": self._get_optional_env("LOG_LEVEL"),
        }
        return {key: value for key, value in overrides.items() if value is not None}

    def get_config(self, preset: Optional[str] = None) -> RelayConfig:
        """
        Get the relay configuration.

        Args:
            preset: Preset to start from. Falls back to ``RELAY_PRESET``, then
                to plain RelayConfig defaults.

        Returns:
            RelayConfig: Relay configuration

        Raises:
            ConfigurationError: If a value is missing, malformed or invalid
        """
        preset = preset or self._get_optional_env("RELAY_PRESET")
        try:
            overrides = self._collect_overrides()
            if preset:
                config = RelayConfig.from_preset(preset, **overrides)
            else:
                config = replace(RelayConfig(), **overrides)
        except ConfigurationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

        logger.info(
            f"Configuration loaded: preset={preset or 'default'} mode={config.mode} "
            f"port={config.port}"
        )
        return config
