"""Chat Actions - Registration table from action names to handlers.

The table is built once at start-up; the UI dispatches actions by name
with a keyword payload.

Payloads:
- SHOW_CONTEXT_MENU_FOR_ACTIVITY: activity
- CLOSE_CONVERSATION: document_id
- RESTART_CONVERSATION: document_id, require_new_conversation_id, require_new_user_id
- OPEN_TRANSCRIPT: filename
"""

from enum import Enum
from typing import Any, Awaitable, Callable

from bot_emulator.exceptions import UnknownActionError
from bot_emulator.orchestrator.chat import ChatOrchestrator


class ChatAction(Enum):
    """Chat actions handled by the orchestrator."""

    SHOW_CONTEXT_MENU_FOR_ACTIVITY = "CHAT/SHOW_CONTEXT_MENU_FOR_ACTIVITY"
    CLOSE_CONVERSATION = "CHAT/CLOSE_CONVERSATION"
    RESTART_CONVERSATION = "CHAT/RESTART_CONVERSATION"
    OPEN_TRANSCRIPT = "CHAT/OPEN_TRANSCRIPT"


ActionHandler = Callable[..., Awaitable[Any]]


def build_action_table(orchestrator: ChatOrchestrator) -> dict[ChatAction, ActionHandler]:
    """Map every chat action to its orchestrator handler."""
    return {
        ChatAction.SHOW_CONTEXT_MENU_FOR_ACTIVITY: orchestrator.show_context_menu_for_activity,
        ChatAction.CLOSE_CONVERSATION: orchestrator.close_conversation,
        ChatAction.RESTART_CONVERSATION: orchestrator.restart_conversation,
        ChatAction.OPEN_TRANSCRIPT: orchestrator.new_transcript,
    }


async def dispatch(
    table: dict[ChatAction, ActionHandler],
    action: ChatAction | str,
    payload: dict[str, Any] | None = None,
) -> Any:
    """Run the handler registered for an action.

    Args:
        table: Table from build_action_table
        action: Action or its string value
        payload: Keyword arguments for the handler

    Returns:
        The handler's result

    Raises:
        UnknownActionError: If the action has no handler
    """
    try:
        action = ChatAction(action)
    except ValueError:
        raise UnknownActionError(action) from None

    handler = table.get(action)
    if handler is None:
        raise UnknownActionError(action)
    return await handler(**(payload or {}))
