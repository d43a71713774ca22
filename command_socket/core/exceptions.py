"""
Core Exceptions - Command Socket
================================
Session-terminating errors raised by the receive path and the transports.

"No message" is not an exception: FrameAssembler.receive_string returns None.
"""

# WebSocket close codes (RFC 6455, section 7.4.1)
NORMAL_CLOSURE = 1000
GOING_AWAY = 1001
UNSUPPORTED_DATA = 1003
INVALID_PAYLOAD_DATA = 1007


class CommandSocketError(Exception):
    """Base exception for everything that ends a WebSocket session early."""
    close_code = None


class ProtocolError(CommandSocketError):
    """
    Raised when the received message is not a valid text message.

    Covers a non-text message type (binary) and malformed UTF-8 payloads.
    The session is closed with ``close_code``.
    """
    def __init__(self, message: str, close_code: int = UNSUPPORTED_DATA):
        self.message = message
        self.close_code = close_code
        super().__init__(self.message)


class SessionCancelled(CommandSocketError):
    """
    Raised when the session cancellation signal is observed mid-receive.

    Close code: 1001 Going Away (server shutdown or request abort)
    """
    close_code = GOING_AWAY

    def __init__(self, message: str = None):
        self.message = message or "Session cancelled before message was complete"
        super().__init__(self.message)


class TransportError(CommandSocketError):
    """
    Raised when the underlying socket fails on receive, send or close.

    The socket is considered unusable; no close handshake is attempted.
    """
    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        self.message = f"WebSocket {operation} failed: {reason}"
        super().__init__(self.message)
