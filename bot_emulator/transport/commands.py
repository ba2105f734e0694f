"""Host Command Transport - Calls into the desktop host process.

The host process owns desktop integration (context menus, clipboard, file
parsing) and conversation teardown on the server side. The chat core only
sees it through ``CommandService.remote_call``.
"""

from typing import Any, Protocol


class Commands:
    """Command names understood by the host process."""

    DELETE_CONVERSATION = "emulator:delete-conversation"
    EXTRACT_ACTIVITIES_FROM_FILE = "emulator:extract-activities-from-file"
    GET_SPEECH_TOKEN = "speech:get-token"
    DISPLAY_CONTEXT_MENU = "electron:display-context-menu"
    WRITE_CLIPBOARD_TEXT = "electron:clipboard-write-text"


class CommandService(Protocol):
    """Protocol for the host command transport."""

    async def remote_call(self, command_name: str, *args: Any) -> Any:
        """Invoke a command in the host process and return its result.

        Args:
            command_name: One of the ``Commands`` names
            *args: Command arguments (JSON-serializable)

        Returns:
            Command result, or None when the command has none
        """
        ...
