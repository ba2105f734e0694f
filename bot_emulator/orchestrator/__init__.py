"""Orchestrator module - Chat session sequencing.

Provides:
- ChatOrchestrator: session lifecycle, transcripts, speech pipeline
- DirectLineConnection: connection handle owned by a session
- ChatAction / build_action_table / dispatch: action registration
"""

from bot_emulator.orchestrator.chat import ChatOrchestrator, create_chat_orchestrator
from bot_emulator.orchestrator.connection import (
    Connection,
    ConnectionFactory,
    DirectLineConnection,
    create_direct_line,
)
from bot_emulator.orchestrator.actions import ChatAction, build_action_table, dispatch

__all__ = [
    # Orchestration
    "ChatOrchestrator",
    "create_chat_orchestrator",
    # Connections
    "Connection",
    "ConnectionFactory",
    "DirectLineConnection",
    "create_direct_line",
    # Actions
    "ChatAction",
    "build_action_table",
    "dispatch",
]
