"""
ASGI Application - FastAPI Host
===============================
FastAPI serves the plain HTTP routes; CommandSocketMiddleware sits in front
of it and takes the WebSocket connections on the command path.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request

from ..core.logger import StructuredLogger
from ..infrastructure.config.config_loader import get_settings_from_working_directory
from ..infrastructure.config.settings import AppSettings
from ..infrastructure.container import Container
from .websocket.handlers.command_handler import PARAMETER_DELIMITER
from .websocket.middleware import CommandSocketMiddleware


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Creates the FastAPI application with the command endpoint mounted."""

    settings = settings or get_settings_from_working_directory()
    logger = StructuredLogger("command_socket", settings.logging)
    container = Container(settings, logger)
    lifecycle = container.create_session_lifecycle()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("command_socket.startup", {
            "websocket_path": settings.websocket.path,
            "receive_buffer_size": settings.websocket.receive_buffer_size
        })
        yield
        cancelled = lifecycle.cancel_all()
        logger.info("command_socket.shutdown", {
            "cancelled_sessions": cancelled,
            **lifecycle.get_stats()
        })

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.container = container
    app.state.session_lifecycle = lifecycle

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat()
        }

    @app.get("/")
    async def index(request: Request):
        dispatcher = lifecycle.command_dispatcher
        return {
            "service": settings.app_name,
            "version": settings.version,
            "websocket_path": settings.websocket.path,
            "commands": sorted(dispatcher.simple_commands),
            "parameterized_commands": [
                f"{keyword}{PARAMETER_DELIMITER}<argument>"
                for keyword in sorted(dispatcher.parameterized_commands)
            ],
            "sessions": request.app.state.session_lifecycle.get_stats()
        }

    app.add_middleware(
        CommandSocketMiddleware,
        lifecycle=lifecycle,
        path=settings.websocket.path,
        logger=logger
    )
    return app
