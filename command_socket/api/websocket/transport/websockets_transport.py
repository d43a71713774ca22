"""
WebsocketsTransport - websockets Library Adapter
================================================
Wraps a ``websockets`` asyncio ServerConnection and reads messages with
``recv_streaming()``, so every WebSocket fragment reaches the receive loop.

A fragment is handed out in ``max_bytes`` chunks. The next fragment is
pulled as soon as the current one is drained, which is how the end of the
message is known before the last chunk is returned.
"""

from typing import AsyncIterator, Optional, Union

from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from ....core.exceptions import INVALID_PAYLOAD_DATA, NORMAL_CLOSURE, ProtocolError, TransportError
from .base import MessageType, ReceiveResult, WebSocketTransport


def _as_bytes(fragment: Union[str, bytes]) -> bytes:
    if isinstance(fragment, str):
        return fragment.encode("utf-8")
    return bytes(fragment)


def _closed_by_invalid_payload(error: ConnectionClosed) -> bool:
    return any(
        frame is not None and frame.code == INVALID_PAYLOAD_DATA
        for frame in (error.sent, error.rcvd)
    )


class WebsocketsTransport(WebSocketTransport):
    """WebSocketTransport over a websockets ServerConnection."""

    def __init__(self, websocket):
        self.websocket = websocket
        self._fragments: Optional[AsyncIterator[Union[str, bytes]]] = None
        self._message_type: Optional[MessageType] = None
        self._pending = b""
        self._exhausted = False

    @property
    def is_open(self) -> bool:
        return self.websocket.state is State.OPEN

    @property
    def client_ip(self) -> str:
        remote_address = getattr(self.websocket, "remote_address", None)
        if isinstance(remote_address, tuple) and remote_address:
            return remote_address[0]
        return "unknown"

    async def _next_fragment(self) -> None:
        """Append the next fragment to the pending bytes, or mark the message complete."""
        try:
            fragment = await self._fragments.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            return
        except ConnectionClosed as e:
            if _closed_by_invalid_payload(e):
                raise ProtocolError("Invalid UTF-8 in text message", INVALID_PAYLOAD_DATA) from e
            raise TransportError("receive", f"connection closed mid-message ({e})") from e
        self._pending += _as_bytes(fragment)

    async def receive(self, max_bytes: int) -> ReceiveResult:
        if self._fragments is None:
            self._fragments = self.websocket.recv_streaming()
            self._exhausted = False
            try:
                first = await self._fragments.__anext__()
            except ConnectionClosed as e:
                self._fragments = None
                if _closed_by_invalid_payload(e):
                    raise ProtocolError("Invalid UTF-8 in text message", INVALID_PAYLOAD_DATA) from e
                close_frame = e.rcvd
                return ReceiveResult.closed(
                    close_frame.code if close_frame else None,
                    close_frame.reason if close_frame else None,
                )
            self._message_type = MessageType.TEXT if isinstance(first, str) else MessageType.BINARY
            self._pending = _as_bytes(first)

        if not self._pending and not self._exhausted:
            await self._next_fragment()

        chunk, self._pending = self._pending[:max_bytes], self._pending[max_bytes:]
        if not self._pending and not self._exhausted:
            await self._next_fragment()

        message_type = self._message_type
        end_of_message = self._exhausted and not self._pending
        if end_of_message:
            self._fragments = None
            self._message_type = None
        return ReceiveResult(chunk, message_type, end_of_message)

    async def send_text(self, data: str) -> None:
        try:
            await self.websocket.send(data)
        except ConnectionClosed as e:
            raise TransportError("send", str(e)) from e

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        if not self.is_open:
            return
        try:
            await self.websocket.close(code=code, reason=reason)
        except ConnectionClosed as e:
            raise TransportError("close", str(e)) from e
