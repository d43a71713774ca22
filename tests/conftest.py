"""
Shared pytest fixtures for the command socket tests
===================================================
FakeTransport replays a scripted list of ReceiveResults (or exceptions)
and records everything sent or closed.
"""

from typing import Callable, List, Optional, Union

import pytest

from command_socket.api.websocket.transport.base import MessageType, ReceiveResult, WebSocketTransport
from command_socket.infrastructure.config.settings import AppSettings, LoggingSettings


class FakeTransport(WebSocketTransport):
    """Scripted WebSocketTransport"""

    def __init__(self,
                 results: Optional[List[Union[ReceiveResult, Exception]]] = None,
                 client_ip: str = "10.0.0.1",
                 send_error: Optional[Exception] = None,
                 on_receive: Optional[Callable[[int], None]] = None):
        self.results = list(results or [])
        self._client_ip = client_ip
        self.send_error = send_error
        self.on_receive = on_receive
        self.sent: List[str] = []
        self.closes: List[tuple] = []
        self.receive_sizes: List[int] = []
        self.open = True

    @property
    def is_open(self) -> bool:
        return self.open

    @property
    def client_ip(self) -> str:
        return self._client_ip

    async def receive(self, max_bytes: int) -> ReceiveResult:
        self.receive_sizes.append(max_bytes)
        if self.on_receive:
            self.on_receive(len(self.receive_sizes))
        if not self.results:
            return ReceiveResult.closed()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        if result.message_type == MessageType.CLOSE:
            self.open = False
        return result

    async def send_text(self, data: str) -> None:
        if self.send_error:
            raise self.send_error
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if not self.open:
            return
        self.closes.append((code, reason))
        self.open = False


def text_frames(*payloads: Union[str, bytes]) -> List[ReceiveResult]:
    """Text message split into one ReceiveResult per payload, final flag on the last."""
    frames = []
    for index, payload in enumerate(payloads):
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        frames.append(ReceiveResult(data, MessageType.TEXT, index == len(payloads) - 1))
    return frames


@pytest.fixture
def make_transport():
    """Factory fixture: make_transport(results, **kwargs) -> FakeTransport"""
    def _make(results=None, **kwargs) -> FakeTransport:
        return FakeTransport(results, **kwargs)
    return _make


@pytest.fixture
def frames():
    """Builder for multi-frame text messages"""
    return text_frames


@pytest.fixture
def test_settings() -> AppSettings:
    """Settings with console-only logging"""
    return AppSettings(logging=LoggingSettings(console_enabled=False, file_enabled=False))
