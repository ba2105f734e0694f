"""State module - session registry and data model."""

from bot_emulator.state.registry import (
    ChatMode,
    ChatSession,
    ChatStore,
    Document,
    RegistryEvent,
    RegistryEventType,
    SessionRegistry,
    create_chat_store,
)

__all__ = [
    "ChatMode",
    "ChatSession",
    "ChatStore",
    "Document",
    "RegistryEvent",
    "RegistryEventType",
    "SessionRegistry",
    "create_chat_store",
]
