"""
StarletteTransport - ASGI WebSocket Adapter
===========================================
Wraps ``starlette.websockets.WebSocket``. The ASGI server delivers each
message whole, so the transport slices it into ``max_bytes`` chunks and
flags the last one as the end of the message.
"""

from typing import Optional

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from ....core.exceptions import INVALID_PAYLOAD_DATA, NORMAL_CLOSURE, ProtocolError, TransportError
from .base import MessageType, ReceiveResult, WebSocketTransport


class StarletteTransport(WebSocketTransport):
    """WebSocketTransport over an accepted Starlette/FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._pending = b""
        self._message_type: Optional[MessageType] = None

    @property
    def is_open(self) -> bool:
        return (self.websocket.application_state == WebSocketState.CONNECTED
                and self.websocket.client_state == WebSocketState.CONNECTED)

    @property
    def client_ip(self) -> str:
        client = self.websocket.client
        return client.host if client else "unknown"

    async def receive(self, max_bytes: int) -> ReceiveResult:
        if self._message_type is None:
            try:
                message = await self.websocket.receive()
            except (RuntimeError, OSError) as e:
                raise TransportError("receive", str(e)) from e

            if message["type"] == "websocket.disconnect":
                # The ASGI server rejects invalid UTF-8 text with a 1007 disconnect
                if message.get("code") == INVALID_PAYLOAD_DATA:
                    raise ProtocolError("Invalid UTF-8 in text message", INVALID_PAYLOAD_DATA)
                return ReceiveResult.closed(message.get("code"), message.get("reason"))

            text = message.get("text")
            if text is not None:
                self._message_type = MessageType.TEXT
                self._pending = text.encode("utf-8")
            else:
                self._message_type = MessageType.BINARY
                self._pending = message.get("bytes") or b""

        chunk, self._pending = self._pending[:max_bytes], self._pending[max_bytes:]
        message_type = self._message_type
        end_of_message = not self._pending
        if end_of_message:
            self._message_type = None
        return ReceiveResult(chunk, message_type, end_of_message)

    async def send_text(self, data: str) -> None:
        try:
            await self.websocket.send_text(data)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise TransportError("send", str(e) or type(e).__name__) from e

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        if not self.is_open:
            return
        try:
            await self.websocket.close(code=code, reason=reason or None)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise TransportError("close", str(e) or type(e).__name__) from e
