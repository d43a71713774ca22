"""
SessionLifecycle - One Message Per Connection
=============================================
Runs a WebSocket session end to end: receive one message, dispatch it,
release the socket.

Lifecycle stages:
1. Register a cancellation signal for the session
2. FrameAssembler reads one message (None -> nothing to answer)
3. CommandDispatcher sends the replies or closes
4. Close with 1000 if the socket is still open
5. Unregister the signal

Errors end the session: ProtocolError and SessionCancelled close with their
close code, TransportError leaves the broken socket alone.
"""

import asyncio
from typing import Any, Dict, Set

from ....core.exceptions import NORMAL_CLOSURE, ProtocolError, SessionCancelled, TransportError
from ..handlers.command_handler import CommandDispatcher
from ..transport.base import WebSocketTransport
from ..utils.frame_assembler import FrameAssembler


class SessionLifecycle:
    """
    Orchestrates one WebSocket session per call to handle_session().

    Sessions share nothing but the registry of cancellation signals, which
    lets the host cancel every live session on shutdown.

    Dependencies:
    - frame_assembler: Receive path
    - command_dispatcher: Command protocol
    - logger: Optional logger for diagnostics
    """

    def __init__(self,
                 frame_assembler: FrameAssembler,
                 command_dispatcher: CommandDispatcher,
                 logger=None):
        self.frame_assembler = frame_assembler
        self.command_dispatcher = command_dispatcher
        self.logger = logger

        self._active: Set[asyncio.Event] = set()

        # Statistics
        self.total_sessions_handled = 0
        self.total_messages_dispatched = 0
        self.total_no_message_sessions = 0
        self.errors_by_type: Dict[str, int] = {}

    @property
    def active_sessions(self) -> int:
        return len(self._active)

    async def handle_session(self, transport: WebSocketTransport) -> str:
        """
        Handle one accepted WebSocket connection.

        Args:
            transport: Accepted WebSocket transport

        Returns:
            Session outcome: "dispatched", "no_message", or the error type name
        """
        cancelled = asyncio.Event()
        self._active.add(cancelled)
        self.total_sessions_handled += 1
        client_ip = transport.client_ip

        if self.logger:
            self.logger.debug("command_socket.session_started", {"client_ip": client_ip})

        try:
            message = await self.frame_assembler.receive_string(transport, cancelled)
            if message is None:
                self.total_no_message_sessions += 1
                outcome = "no_message"
            else:
                await self.command_dispatcher.dispatch(transport, message)
                self.total_messages_dispatched += 1
                outcome = "dispatched"
            await self._release(transport, NORMAL_CLOSURE, "")

        except TransportError as e:
            outcome = self._record_error(e, client_ip)

        except (ProtocolError, SessionCancelled) as e:
            outcome = self._record_error(e, client_ip)
            await self._release(transport, e.close_code, e.message)

        finally:
            self._active.discard(cancelled)

        if self.logger:
            self.logger.info("command_socket.session_completed", {
                "client_ip": client_ip,
                "outcome": outcome,
            })
        return outcome

    def cancel_all(self) -> int:
        """
        Signal cancellation to every live session.

        Returns:
            Number of sessions signalled
        """
        signalled = 0
        for cancelled in list(self._active):
            if not cancelled.is_set():
                cancelled.set()
                signalled += 1

        if self.logger and signalled:
            self.logger.info("command_socket.sessions_cancelled", {"count": signalled})
        return signalled

    def _record_error(self, error: Exception, client_ip: str) -> str:
        error_type = type(error).__name__
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

        if self.logger:
            self.logger.warning("command_socket.session_failed", {
                "client_ip": client_ip,
                "error": str(error),
                "error_type": error_type,
            })
        return error_type

    async def _release(self, transport: WebSocketTransport, code: int, reason: str) -> None:
        """Close the socket if it is still open. A failing close only gets logged."""
        try:
            await transport.close(code, reason)
        except TransportError as e:
            if self.logger:
                self.logger.debug("command_socket.close_failed", {
                    "client_ip": transport.client_ip,
                    "code": code,
                    "error": str(e),
                })

    def get_stats(self) -> Dict[str, Any]:
        """
        Get session statistics.

        Returns:
            Statistics dict with session, message and error counts
        """
        return {
            "active_sessions": self.active_sessions,
            "total_sessions_handled": self.total_sessions_handled,
            "total_messages_dispatched": self.total_messages_dispatched,
            "total_no_message_sessions": self.total_no_message_sessions,
            "errors_by_type": dict(self.errors_by_type),
        }
