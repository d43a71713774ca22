"""
Command Socket - Entry Point
============================
Starts the command endpoint under uvicorn (asgi mode) or on the websockets
library server (standalone mode).

Usage:
    command-socket
    command-socket --mode standalone --port 9000
    command-socket --config config/config.json
"""

import argparse
import asyncio
from typing import List, Optional

import uvicorn
from pydantic import ValidationError

from .api.app import create_app
from .api.standalone_server import StandaloneCommandServer
from .core.logger import get_logger
from .infrastructure.config.config_loader import get_settings_from_working_directory
from .infrastructure.config.settings import AppSettings, ServerMode, WebSocketSettings
from .infrastructure.container import Container


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="WebSocket command endpoint")
    parser.add_argument("--config", default=None, help="Path to config.json")
    parser.add_argument("--mode", choices=[mode.value for mode in ServerMode], default=None,
                        help="Hosting mode (overrides config)")
    parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    return parser


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    settings = get_settings_from_working_directory(args.config)
    overrides = {}
    if args.mode:
        overrides["mode"] = ServerMode(args.mode)
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if overrides:
        # Rebuilt rather than copied so the overrides go through validation
        settings.websocket = WebSocketSettings(**{**settings.websocket.model_dump(), **overrides})
    return settings


def run_standalone(settings: AppSettings) -> None:
    logger = get_logger("command_socket", settings.logging)
    container = Container(settings, logger)
    server = StandaloneCommandServer(container.create_session_lifecycle(), settings.websocket, logger)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("command_socket.interrupted")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = resolve_settings(args)
    except ValidationError as e:
        parser.error(f"invalid override: {e}")

    if settings.websocket.mode == ServerMode.STANDALONE:
        run_standalone(settings)
    else:
        uvicorn.run(
            create_app(settings),
            host=settings.websocket.host,
            port=settings.websocket.port,
            log_level=settings.logging.level.value.lower()
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
