"""
Dependency Injection Container - Composition Root Pattern
=========================================================
Created once at startup; assembles the command endpoint from Settings.

- Constructor injection only
- No business logic, only object assembly
- No global access
"""

from typing import Optional

from ..api.websocket.handlers.command_handler import CommandDispatcher
from ..api.websocket.lifecycle.session_lifecycle import SessionLifecycle
from ..api.websocket.utils.frame_assembler import FrameAssembler
from ..core.logger import StructuredLogger
from .config.settings import AppSettings


class Container:
    """Assembles the receive path, the dispatcher and the session lifecycle."""

    def __init__(self, settings: AppSettings, logger: StructuredLogger):
        self.settings = settings
        self.logger = logger
        self._session_lifecycle: Optional[SessionLifecycle] = None

    def create_frame_assembler(self) -> FrameAssembler:
        return FrameAssembler(
            buffer_size=self.settings.websocket.receive_buffer_size,
            logger=self.logger
        )

    def create_command_dispatcher(self) -> CommandDispatcher:
        return CommandDispatcher(logger=self.logger)

    def create_session_lifecycle(self) -> SessionLifecycle:
        """
        Create the session lifecycle. One instance per container, so every
        host sharing the container cancels the same set of sessions.
        """
        if self._session_lifecycle is None:
            self._session_lifecycle = SessionLifecycle(
                frame_assembler=self.create_frame_assembler(),
                command_dispatcher=self.create_command_dispatcher(),
                logger=self.logger
            )
            self.logger.debug("container.session_lifecycle_created", {
                "receive_buffer_size": self.settings.websocket.receive_buffer_size
            })
        return self._session_lifecycle
