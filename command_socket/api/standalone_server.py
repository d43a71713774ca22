"""
StandaloneCommandServer - websockets Library Host
=================================================
Serves the command endpoint without an ASGI server. Fragmented messages are
reassembled frame by frame through WebsocketsTransport.

Plain HTTP on the same port:
- GET /health -> 200 "OK"
- any other path than the command path -> 404
"""

import asyncio
import http
from typing import Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import serve

from ..infrastructure.config.settings import WebSocketSettings
from .websocket.lifecycle.session_lifecycle import SessionLifecycle
from .websocket.transport.websockets_transport import WebsocketsTransport


class StandaloneCommandServer:
    """
    websockets-based host for SessionLifecycle.

    Dependencies:
    - lifecycle: SessionLifecycle shared by every connection
    - settings: WebSocketSettings (host, port, path, limits)
    - logger: Optional logger for diagnostics
    """

    def __init__(self, lifecycle: SessionLifecycle, settings: WebSocketSettings, logger=None):
        self.lifecycle = lifecycle
        self.settings = settings
        self.logger = logger
        self.server = None
        self.is_running = False

    @property
    def port(self) -> Optional[int]:
        """Port actually bound (useful when configured with port 0)."""
        if not self.server or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    def _process_request(self, connection, request):
        path = urlsplit(request.path).path
        if path == "/health":
            return connection.respond(http.HTTPStatus.OK, "OK\n")
        if path != self.settings.path:
            return connection.respond(http.HTTPStatus.NOT_FOUND, "Not Found\n")
        return None

    async def _handle_connection(self, connection) -> None:
        await self.lifecycle.handle_session(WebsocketsTransport(connection))

    async def start(self) -> None:
        if self.is_running:
            return

        try:
            self.server = await serve(
                self._handle_connection,
                self.settings.host,
                self.settings.port,
                process_request=self._process_request,
                max_size=self.settings.max_message_size,
                close_timeout=self.settings.close_timeout_seconds,
                compression=None
            )
        except OSError as e:
            if self.logger:
                self.logger.error("standalone_server.start_error", {
                    "host": self.settings.host,
                    "port": self.settings.port,
                    "error": str(e),
                    "error_type": type(e).__name__
                })
            raise

        self.is_running = True
        if self.logger:
            self.logger.info("standalone_server.started", {
                "host": self.settings.host,
                "port": self.port,
                "path": self.settings.path
            })

    async def stop(self) -> None:
        if not self.is_running:
            return

        cancelled = self.lifecycle.cancel_all()
        self.server.close()
        await self.server.wait_closed()
        self.is_running = False

        if self.logger:
            self.logger.info("standalone_server.stopped", {
                "cancelled_sessions": cancelled,
                **self.lifecycle.get_stats()
            })

    async def serve_forever(self) -> None:
        await self.start()
        try:
            await asyncio.Future()
        finally:
            await self.stop()
