"""Transport module - conversation server client and host commands."""

from bot_emulator.transport.commands import CommandService, Commands
from bot_emulator.transport.conversation import (
    ConversationService,
    StartConversationPayload,
    UpdateConversationPayload,
)

__all__ = [
    "CommandService",
    "Commands",
    "ConversationService",
    "StartConversationPayload",
    "UpdateConversationPayload",
]
