"""
FrameAssembler - Receive Path
=============================
Reads exactly one logical message from a transport and decodes it as text.

Receive loop:
1. Check the cancellation signal
2. Receive up to ``buffer_size`` bytes and append them to the buffer
3. Repeat until the transport reports the end of the message
4. Reject non-text messages, decode the rest as strict UTF-8

A close before any data means "no message" and is returned as None; a close
after part of a message has arrived is a transport failure.
"""

import asyncio
from typing import Optional

from ....core.exceptions import INVALID_PAYLOAD_DATA, ProtocolError, SessionCancelled, TransportError
from ..transport.base import MessageType, WebSocketTransport

DEFAULT_BUFFER_SIZE = 8192


class FrameAssembler:
    """
    Reassembles one logical WebSocket message out of transport chunks.

    Dependencies:
    - buffer_size: bytes requested per receive call
    - logger: Optional logger for diagnostics
    """

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE, logger=None):
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        self.buffer_size = buffer_size
        self.logger = logger

    async def receive_string(self,
                             transport: WebSocketTransport,
                             cancelled: Optional[asyncio.Event] = None) -> Optional[str]:
        """
        Receive one complete text message.

        Args:
            transport: Open WebSocket transport
            cancelled: Session cancellation signal, checked before every receive

        Returns:
            The decoded message, or None if the peer closed before sending one

        Raises:
            SessionCancelled: cancellation signal was set
            ProtocolError: message is not text, or is not valid UTF-8
            TransportError: socket failure (raised by the transport)
        """
        buffer = bytearray()
        chunks = 0

        while True:
            if cancelled is not None and cancelled.is_set():
                if self.logger:
                    self.logger.debug("frame_assembler.cancelled", {
                        "client_ip": transport.client_ip,
                        "bytes_received": len(buffer),
                    })
                raise SessionCancelled()

            result = await transport.receive(self.buffer_size)

            if result.message_type == MessageType.CLOSE:
                if buffer:
                    raise TransportError("receive", "connection closed mid-message")
                if self.logger:
                    self.logger.debug("frame_assembler.closed_before_message", {
                        "client_ip": transport.client_ip,
                        "close_status": result.close_status,
                        "bytes_received": len(buffer),
                    })
                return None

            buffer.extend(result.data)
            chunks += 1
            if result.end_of_message:
                break

        if result.message_type != MessageType.TEXT:
            raise ProtocolError(f"Unexpected message type: {result.message_type.value}")

        try:
            message = buffer.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Invalid UTF-8 in text message: {e.reason}", INVALID_PAYLOAD_DATA) from e

        if self.logger:
            self.logger.debug("frame_assembler.message_received", {
                "client_ip": transport.client_ip,
                "chunks": chunks,
                "bytes": len(buffer),
            })
        return message
