#!/usr/bin/env python3
"""
WebSocket Relay Server for Peer Relay.

This script starts the relay server with a preset (chat, signal or
position) and any overrides given on the command line or in the
environment.
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

# Allow running from a checkout without installing
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from peer_relay.config import PRESETS, RelayConfigManager
from peer_relay.config.settings import VALID_LOG_LEVELS
from peer_relay.infrastructure import ConfigurationError, get_logger, setup_logging
from peer_relay.websockets.server.relay_server import main as run_server


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the peer relay server")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Relay flavour to start from (default: RELAY_PRESET or plain broadcast)",
    )
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--env-file", default=".env", help="Environment file to load")
    parser.add_argument(
        "--log-level", type=str.upper, choices=VALID_LOG_LEVELS, help="Override the log level"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logging(component_name="websocket_relay", log_level=args.log_level)

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        config = RelayConfigManager(args.env_file).get_config(args.preset)
        config = replace(config, **overrides)
    except ConfigurationError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 2

    get_logger("relay_server").setLevel(config.log_level)
    logger.info("Starting WebSocket Relay Server...")
    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
