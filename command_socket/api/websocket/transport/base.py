"""
WebSocket Transport - Frame-Level Socket Interface
==================================================
The receive side hands out a message in bounded chunks, each tagged with the
message type and whether it completes the logical message. Hosts wrap their
own socket objects (Starlette, websockets) in a WebSocketTransport.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ....core.exceptions import NORMAL_CLOSURE


class MessageType(str, Enum):
    """WebSocket message types as seen by the receive loop"""
    TEXT = "text"
    BINARY = "binary"
    CLOSE = "close"


@dataclass(frozen=True)
class ReceiveResult:
    """One chunk of a logical message."""
    data: bytes
    message_type: MessageType
    end_of_message: bool
    close_status: Optional[int] = None
    close_reason: Optional[str] = None

    @classmethod
    def closed(cls, status: Optional[int] = None, reason: Optional[str] = None) -> "ReceiveResult":
        return cls(b"", MessageType.CLOSE, True, close_status=status, close_reason=reason)


class WebSocketTransport(ABC):
    """
    Accepted WebSocket connection, seen one chunk at a time.

    Implementations raise TransportError for socket failures and
    ProtocolError for payloads the library itself rejected.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True while sends are still allowed."""

    @property
    def client_ip(self) -> str:
        return "unknown"

    @abstractmethod
    async def receive(self, max_bytes: int) -> ReceiveResult:
        """Return at most ``max_bytes`` bytes of the current message."""

    @abstractmethod
    async def send_text(self, data: str) -> None:
        """Send ``data`` as one final text frame."""

    @abstractmethod
    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        """Run the closing handshake. No-op when already closed."""
