"""
Unit tests for WebsocketsTransport
==================================
Tests fragment-by-fragment receive over recv_streaming(), end-of-message
detection, close mapping and error wrapping.
"""

import pytest
from unittest.mock import AsyncMock, Mock
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close
from websockets.protocol import State

from command_socket.api.websocket.transport import MessageType, WebsocketsTransport
from command_socket.api.websocket.utils import FrameAssembler
from command_socket.core.exceptions import ProtocolError, TransportError


def streaming(*items):
    """recv_streaming() replacement yielding fragments, raising exceptions in place"""
    async def generator():
        for item in items:
            if isinstance(item, Exception):
                raise item
            yield item
    return generator


def mock_connection(*items, remote_address=("192.168.1.100", 54321)):
    connection = Mock()
    connection.recv_streaming = Mock(side_effect=lambda: streaming(*items)())
    connection.send = AsyncMock()
    connection.close = AsyncMock()
    connection.state = State.OPEN
    connection.remote_address = remote_address
    return connection


class TestWebsocketsTransportReceive:
    """Test receive()"""

    @pytest.mark.asyncio
    async def test_single_fragment(self):
        """Test a one-frame text message"""
        transport = WebsocketsTransport(mock_connection("hola"))

        result = await transport.receive(8192)

        assert result.data == b"hola"
        assert result.message_type == MessageType.TEXT
        assert result.end_of_message is True

    @pytest.mark.asyncio
    async def test_fragments_end_flag_on_last(self):
        """Test only the chunk carrying the last fragment ends the message"""
        transport = WebsocketsTransport(mock_connection("ho", "la#", "ana"))

        results = [await transport.receive(8192) for _ in range(3)]

        assert [r.data for r in results] == [b"ho", b"la#", b"ana"]
        assert [r.end_of_message for r in results] == [False, False, True]

    @pytest.mark.asyncio
    async def test_fragment_larger_than_buffer(self):
        """Test a fragment is split by max_bytes"""
        transport = WebsocketsTransport(mock_connection("abcdef"))

        results = [await transport.receive(4), await transport.receive(4)]

        assert [r.data for r in results] == [b"abcd", b"ef"]
        assert [r.end_of_message for r in results] == [False, True]

    @pytest.mark.asyncio
    async def test_binary_fragments(self):
        """Test bytes fragments are tagged binary"""
        transport = WebsocketsTransport(mock_connection(b"\x00", b"\x01"))

        first = await transport.receive(8192)

        assert first.message_type == MessageType.BINARY

    @pytest.mark.asyncio
    async def test_closed_before_first_fragment(self):
        """Test ConnectionClosed before any data is a CLOSE result"""
        error = ConnectionClosedOK(Close(1000, "bye"), None)
        transport = WebsocketsTransport(mock_connection(error))

        result = await transport.receive(8192)

        assert result.message_type == MessageType.CLOSE
        assert result.close_status == 1000
        assert result.close_reason == "bye"

    @pytest.mark.asyncio
    async def test_closed_mid_message(self):
        """Test ConnectionClosed after the first fragment is a TransportError"""
        error = ConnectionClosedError(None, None)
        transport = WebsocketsTransport(mock_connection("ho", error))

        with pytest.raises(TransportError):
            await transport.receive(8192)

    @pytest.mark.asyncio
    async def test_invalid_utf8_close_is_protocol_error(self):
        """Test the library's 1007 close maps to ProtocolError"""
        error = ConnectionClosedError(None, Close(1007, "invalid start byte"))
        transport = WebsocketsTransport(mock_connection(error))

        with pytest.raises(ProtocolError) as exc_info:
            await transport.receive(8192)

        assert exc_info.value.close_code == 1007

    @pytest.mark.asyncio
    async def test_assembler_over_fragments(self):
        """Test FrameAssembler rebuilds a fragmented message with a tiny buffer"""
        transport = WebsocketsTransport(mock_connection("HO", "LA#", "María"))
        assembler = FrameAssembler(buffer_size=2)

        message = await assembler.receive_string(transport)

        assert message == "HOLA#María"


class TestWebsocketsTransportSendClose:
    """Test send_text() and close()"""

    @pytest.mark.asyncio
    async def test_send_text(self):
        """Test send_text sends one text message"""
        connection = mock_connection()
        transport = WebsocketsTransport(connection)

        await transport.send_text("Hola usuario ana")

        connection.send.assert_awaited_once_with("Hola usuario ana")

    @pytest.mark.asyncio
    async def test_send_on_closed_connection(self):
        """Test ConnectionClosed on send becomes TransportError"""
        connection = mock_connection()
        connection.send = AsyncMock(side_effect=ConnectionClosedError(None, None))
        transport = WebsocketsTransport(connection)

        with pytest.raises(TransportError):
            await transport.send_text("hola")

    @pytest.mark.asyncio
    async def test_close(self):
        """Test close passes code and reason"""
        connection = mock_connection()
        transport = WebsocketsTransport(connection)

        await transport.close(1000, "Desconectado")

        connection.close.assert_awaited_once_with(code=1000, reason="Desconectado")

    @pytest.mark.asyncio
    async def test_close_when_not_open(self):
        """Test close is a no-op once the connection left OPEN"""
        connection = mock_connection()
        connection.state = State.CLOSED
        transport = WebsocketsTransport(connection)

        await transport.close(1000, "")

        connection.close.assert_not_called()

    def test_client_ip(self):
        """Test client IP comes from remote_address"""
        assert WebsocketsTransport(mock_connection()).client_ip == "192.168.1.100"
        assert WebsocketsTransport(mock_connection(remote_address=None)).client_ip == "unknown"
