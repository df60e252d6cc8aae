#!/usr/bin/env python3
"""
CLI for starting the folder watcher server.

Usage:
    python -m folder_watcher --port 9847 --debounce-ms 500
    folder-watcher --host 0.0.0.0 --log-level debug
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .config import WatcherConfig
from .server import WatcherServer

logger = logging.getLogger("folder_watcher.cli")


def setup_logging(level: str = "info") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_environment() -> None:
    """Load .env from the working directory, if present."""
    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)


def build_parser(defaults: WatcherConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folder-watcher",
        description="File system watcher streaming media folder changes over WebSocket",
    )
    parser.add_argument("--host", default=defaults.host,
                        help=f"Interface to bind (default: {defaults.host})")
    parser.add_argument("-p", "--port", type=int, default=defaults.port,
                        help=f"Port to listen on (default: {defaults.port})")
    parser.add_argument("-d", "--debounce-ms", type=int, default=defaults.debounce_ms,
                        help=f"Debounce window in milliseconds (default: {defaults.debounce_ms})")
    parser.add_argument("--log-level", default="info",
                        choices=["debug", "info", "warning", "error"],
                        help="Logging verbosity (default: info)")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> Tuple[WatcherConfig, str]:
    """Merge environment defaults with command line arguments."""
    defaults = WatcherConfig.from_env()
    args = build_parser(defaults).parse_args(argv)
    config = WatcherConfig(
        host=args.host,
        port=args.port,
        debounce_ms=args.debounce_ms,
    )
    return config, args.log_level


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    config, log_level = parse_config(argv)
    setup_logging(log_level)
    
    logger.info(
        f"Starting folder-watcher on port {config.port} with {config.debounce_ms}ms debounce"
    )
    
    server = WatcherServer(config)
    try:
        server.run()
    except KeyboardInterrupt:
        pass
    except SystemExit as e:
        # uvicorn exits this way when the socket cannot be bound
        if e.code:
            logger.error(f"Server error: failed to bind to {config.host}:{config.port}")
            return 1
    
    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
