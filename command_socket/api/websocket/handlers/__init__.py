"""
WebSocket Message Handlers
==========================
CommandDispatcher answers a decoded message from the command tables.
"""

from .command_handler import (
    ActionType,
    CommandAction,
    CommandDispatcher,
    CommandRule,
    FALLBACK_REPLY,
    PARAMETERIZED_COMMANDS,
    PARAMETER_DELIMITER,
    SIMPLE_COMMANDS,
)

__all__ = [
    "ActionType",
    "CommandAction",
    "CommandDispatcher",
    "CommandRule",
    "FALLBACK_REPLY",
    "PARAMETERIZED_COMMANDS",
    "PARAMETER_DELIMITER",
    "SIMPLE_COMMANDS",
]
