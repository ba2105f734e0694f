"""Emulator Constants - Wire values shared with the UI and the emulator server.

These values are part of the contract with the host process and the
chat widget, so they must not drift.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class EmulatorConstants:
    """Immutable emulator contract values."""

    # Document content types
    CONTENT_TYPE_TRANSCRIPT: Final[str] = "application/vnd.microsoft.bfemulator.document.transcript"
    CONTENT_TYPE_LIVE_CHAT: Final[str] = "application/vnd.microsoft.bfemulator.document.livechat"

    # Synthetic user presented to the bot
    DEFAULT_USER_NAME: Final[str] = "User"
    DEFAULT_USER_ROLE: Final[str] = "user"

    # Debug sessions open the bot inspector instead of announcing members
    INSPECT_OPEN_TEXT: Final[str] = "/INSPECT open"

    # Speech services
    DEFAULT_SPEECH_REGION: Final[str] = "westus"

    # Connection domain suffix appended to the server URL
    DIRECT_LINE_PATH: Final[str] = "/v3/directline"

    # Activity context menu (label, id)
    CONTEXT_MENU_ITEMS: tuple[tuple[str, str], ...] = (
        ("Copy text", "copy"),
        ("Copy json", "json"),
    )


# Singleton instance for import convenience
EMULATOR = EmulatorConstants()
