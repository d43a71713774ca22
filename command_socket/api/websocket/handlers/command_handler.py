"""
CommandDispatcher - Command Protocol
====================================
Interprets one decoded message and replies from two fixed command tables.

Message format:
- Simple command: the whole message is the keyword ("hola", "adios")
- Parameterized command: "keyword#argument" ("hola#ana")

Both tables are always consulted: the simple table sees the whole message,
and when the message contains "#" the parameterized table sees it too. A
message such as "hola#ana" therefore gets two replies, the simple-table
fallback followed by "Hola usuario ana".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ....core.exceptions import NORMAL_CLOSURE
from ..transport.base import WebSocketTransport

PARAMETER_DELIMITER = "#"
FALLBACK_REPLY = "Lo siento, pero no entiendo ese mensaje"


class ActionType(str, Enum):
    REPLY = "reply"
    CLOSE = "close"


@dataclass(frozen=True)
class CommandAction:
    """A side effect produced by dispatching a message."""
    action_type: ActionType
    text: str

    @classmethod
    def reply(cls, text: str) -> "CommandAction":
        return cls(ActionType.REPLY, text)

    @classmethod
    def close(cls, reason: str) -> "CommandAction":
        return cls(ActionType.CLOSE, reason)


@dataclass(frozen=True)
class CommandRule:
    """
    Effect bound to a lowercase keyword.

    ``reply`` may contain ``{argument}``, filled in for parameterized commands.
    A rule with ``close_reason`` closes the session instead of replying.
    """
    keyword: str
    reply: Optional[str] = None
    close_reason: Optional[str] = None

    def action(self, argument: str = "") -> CommandAction:
        if self.close_reason is not None:
            return CommandAction.close(self.close_reason)
        return CommandAction.reply(self.reply.format(argument=argument))


SIMPLE_COMMANDS: Dict[str, CommandRule] = {
    "hola": CommandRule("hola", reply="Hola como estás, bienvenido"),
    "adios": CommandRule("adios", close_reason="Desconectado"),
}

PARAMETERIZED_COMMANDS: Dict[str, CommandRule] = {
    "hola": CommandRule("hola", reply="Hola usuario {argument}"),
}


class CommandDispatcher:
    """
    Turns a decoded message into replies and close instructions.

    Dependencies:
    - simple_commands: keyword -> CommandRule, matched against the whole message
    - parameterized_commands: keyword -> CommandRule, matched before the first "#"
    - logger: Optional logger for diagnostics
    """

    def __init__(self,
                 simple_commands: Optional[Dict[str, CommandRule]] = None,
                 parameterized_commands: Optional[Dict[str, CommandRule]] = None,
                 fallback_reply: str = FALLBACK_REPLY,
                 logger=None):
        self.simple_commands = SIMPLE_COMMANDS if simple_commands is None else simple_commands
        self.parameterized_commands = PARAMETERIZED_COMMANDS if parameterized_commands is None else parameterized_commands
        self.fallback_reply = fallback_reply
        self.logger = logger

    def plan(self, message: str) -> List[CommandAction]:
        """
        Compute the actions for ``message`` without touching the socket.

        Args:
            message: Decoded message text

        Returns:
            Actions in the order they are performed
        """
        normalized = message.lower()
        actions = []

        rule = self.simple_commands.get(normalized)
        actions.append(rule.action() if rule else CommandAction.reply(self.fallback_reply))

        if PARAMETER_DELIMITER in normalized:
            keyword, argument = normalized.split(PARAMETER_DELIMITER, 1)
            rule = self.parameterized_commands.get(keyword)
            actions.append(rule.action(argument) if rule else CommandAction.reply(self.fallback_reply))

        return actions

    async def dispatch(self, transport: WebSocketTransport, message: str) -> List[CommandAction]:
        """
        Perform the actions for ``message`` on ``transport``.

        Nothing is sent after a close action.

        Args:
            transport: Open WebSocket transport
            message: Decoded message text

        Returns:
            Actions that were performed

        Raises:
            TransportError: send or close failed
        """
        performed = []
        for action in self.plan(message):
            if action.action_type == ActionType.CLOSE:
                await transport.close(NORMAL_CLOSURE, action.text)
                performed.append(action)
                break
            await transport.send_text(action.text)
            performed.append(action)

        if self.logger:
            self.logger.debug("command_dispatcher.dispatched", {
                "client_ip": transport.client_ip,
                "message_length": len(message),
                "actions": [action.action_type.value for action in performed],
            })
        return performed
