"""
WebSocket Transports
====================
Frame-level adapters for the hosts the command endpoint runs on.
"""

from .base import MessageType, ReceiveResult, WebSocketTransport
from .starlette_transport import StarletteTransport
from .websockets_transport import WebsocketsTransport

__all__ = ["MessageType", "ReceiveResult", "WebSocketTransport", "StarletteTransport", "WebsocketsTransport"]
