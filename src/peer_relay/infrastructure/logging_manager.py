"""
Logging management for the Peer Relay system.

Logging is configured from the ``logging.yaml`` shipped with the package.
The ``ENVIRONMENT`` variable picks the default level:

- development: DEBUG
- staging: INFO
- production: WARNING (also forced onto the relay's own loggers and file handlers)
"""

import copy
import logging
import logging.config
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "logging.yaml"

# Library loggers that stay at WARNING whatever the environment
THIRD_PARTY_LOGGERS = ("websockets", "websockets.server", "websockets.client", "asyncio")


class Environment(Enum):
    """Deployment environment, read from ``ENVIRONMENT``."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def detect(cls) -> "Environment":
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("prod", "production"):
            return cls.PRODUCTION
        if env in ("stage", "staging"):
            return cls.STAGING
        return cls.DEVELOPMENT


LEVEL_BY_ENVIRONMENT = {
    Environment.DEVELOPMENT: "DEBUG",
    Environment.STAGING: "INFO",
    Environment.PRODUCTION: "WARNING",
}


class LoggingManager:
    """Applies the relay's logging configuration for one environment."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.environment = Environment.detect()
        self._config_cache: Optional[Dict[str, Any]] = None

    @property
    def default_level(self) -> str:
        return LEVEL_BY_ENVIRONMENT[self.environment]

    def setup_logging(
        self,
        component_name: str,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> logging.Logger:
        """
        Configure logging and return the logger for ``component_name``.

        Args:
            component_name: Logger name, e.g. ``relay_server``
            log_level: Level for this logger, the environment default if None
            log_file: File for the console fallback, used only when the YAML
                configuration is missing

        Returns:
            Configured logger instance
        """
        level = (log_level or self.default_level).upper()
        config = self._load_yaml_config()

        if config is None:
            logger = self._setup_basic_logging(component_name, log_file)
        else:
            os.makedirs("logs", exist_ok=True)
            logging.config.dictConfig(self._for_environment(config))
            logger = logging.getLogger(component_name)

        logger.setLevel(level)
        for name in THIRD_PARTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
        return logger

    def _load_yaml_config(self) -> Optional[Dict[str, Any]]:
        if self._config_cache is None and self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    self._config_cache = yaml.safe_load(f)
            except (yaml.YAMLError, OSError) as e:
                logging.getLogger(__name__).warning(
                    f"Failed to load YAML logging config {self.config_path}: {e}"
                )
        return self._config_cache

    def _for_environment(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of ``config`` with production levels forced where they apply."""
        config = copy.deepcopy(config)
        if self.environment is not Environment.PRODUCTION:
            return config

        level = self.default_level
        if "root" in config:
            config["root"]["level"] = level
        for name, logger_config in config.get("loggers", {}).items():
            if name not in THIRD_PARTY_LOGGERS:
                logger_config["level"] = level
        for name, handler_config in config.get("handlers", {}).items():
            if name.startswith("file") and handler_config.get("level") == "DEBUG":
                handler_config["level"] = level
        return config

    def _setup_basic_logging(
        self, component_name: str, log_file: Optional[str]
    ) -> logging.Logger:
        """Console (and optional file) handlers when no YAML config is found."""
        if self.environment is Environment.PRODUCTION:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        formatter = logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")

        logger = logging.getLogger(component_name)
        logger.handlers.clear()

        handlers = [logging.StreamHandler()]
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))

        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger


_logging_manager = LoggingManager()


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Set up logging for a component (convenience function)."""
    return _logging_manager.setup_logging(component_name, log_level, log_file)


def get_logger(component_name: str) -> logging.Logger:
    """Get a logger for a component."""
    return logging.getLogger(component_name)
