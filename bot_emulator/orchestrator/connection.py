"""Direct Line Connection - Handle to the real-time bot connection.

The handle carries the identity a chat widget needs to open the
connection. The wire protocol lives in the widget; the chat core only
owns the handle's lifetime and must ``end()`` it before dropping it.
"""

from dataclasses import dataclass, field
from typing import Callable, Protocol

from bot_emulator.config.constants import EMULATOR
from bot_emulator.state.registry import ChatMode


class Connection(Protocol):
    """Minimal contract of a live connection handle."""

    def end(self) -> None:
        """Terminate the connection."""
        ...


@dataclass
class DirectLineConnection:
    """Connection handle bound to one conversation identity."""

    domain: str
    conversation_id: str
    mode: ChatMode
    endpoint_id: str | None
    user_id: str
    ended: bool = False
    _on_end: list[Callable[[], None]] = field(default_factory=list, repr=False)

    @property
    def token(self) -> str:
        """The emulator accepts the conversation id as the connection token."""
        return self.conversation_id

    def on_end(self, callback: Callable[[], None]) -> None:
        """Register a callback run once when the connection ends."""
        self._on_end.append(callback)

    def end(self) -> None:
        """Terminate the connection. Idempotent."""
        if self.ended:
            return
        self.ended = True
        callbacks, self._on_end = self._on_end, []
        for callback in callbacks:
            callback()


# (conversation_id, mode, endpoint_id, user_id) -> connection
ConnectionFactory = Callable[[str, ChatMode, str | None, str], Connection]


def create_direct_line(
    server_url: str,
    conversation_id: str,
    mode: ChatMode,
    endpoint_id: str | None,
    user_id: str,
) -> DirectLineConnection:
    """Create a connection handle for a conversation identity.

    Args:
        server_url: Emulator server base URL
        conversation_id: Conversation to attach to
        mode: Session mode
        endpoint_id: Bot endpoint the conversation talks to
        user_id: Identity presented to the bot

    Returns:
        Live (not ended) connection handle
    """
    return DirectLineConnection(
        domain=f"{server_url}{EMULATOR.DIRECT_LINE_PATH}",
        conversation_id=conversation_id,
        mode=mode,
        endpoint_id=endpoint_id,
        user_id=user_id,
    )
