"""
CommandSocketMiddleware - ASGI Upgrade Boundary
===============================================
Takes WebSocket connections for the command path and passes every other
ASGI scope (HTTP, lifespan, WebSockets on other paths) to the wrapped app
unchanged.
"""

from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocket, WebSocketDisconnect

from .lifecycle.session_lifecycle import SessionLifecycle
from .transport.starlette_transport import StarletteTransport


class CommandSocketMiddleware:
    """
    Pure ASGI middleware serving the command endpoint.

    Usage:
        app.add_middleware(CommandSocketMiddleware, lifecycle=lifecycle, path="/ws")
    """

    def __init__(self, app: ASGIApp, lifecycle: SessionLifecycle, path: str = "/ws", logger=None):
        self.app = app
        self.lifecycle = lifecycle
        self.path = path
        self.logger = logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "websocket" or scope.get("path") != self.path:
            await self.app(scope, receive, send)
            return

        websocket = WebSocket(scope, receive=receive, send=send)
        try:
            await websocket.accept()
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            if self.logger:
                self.logger.warning("middleware.accept_failed", {
                    "path": self.path,
                    "error": str(e),
                    "error_type": type(e).__name__
                })
            return

        await self.lifecycle.handle_session(StarletteTransport(websocket))
