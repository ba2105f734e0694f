"""Session Registry - Keyed store for chat sessions and their UI projections.

Maps a document id to:
- ChatSession: conversation id, user id, mode, endpoint, live connection
- Chat store handle consumed by the chat widget
- Speech factory handle and the pending-retrieval flag
- Log entries and inspector objects shown next to the chat
- Open documents

Every write emits a RegistryEvent so the UI layer can mirror state in the
order it was produced.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from bot_emulator.config.settings import Settings, get_settings
from bot_emulator.exceptions import SessionError
from bot_emulator.observability.logging import get_logger

logger = get_logger(__name__)


class ChatMode(str, Enum):
    """Operating context of a chat session."""

    LIVECHAT = "livechat"
    TRANSCRIPT = "transcript"
    DEBUG = "debug"


@dataclass
class ChatSession:
    """Live state of one conversation with a bot."""

    document_id: str
    conversation_id: str
    mode: ChatMode
    user_id: str
    endpoint_id: str | None = None
    connection: Any = None


@dataclass
class ChatStore:
    """Message store backing the chat widget for one session."""

    activities: list[dict[str, Any]] = field(default_factory=list)


def create_chat_store() -> ChatStore:
    """Create an empty chat store."""
    return ChatStore()


@dataclass
class Document:
    """A document opened in the UI."""

    document_id: str
    content_type: str
    file_name: str | None = None
    is_global: bool = False


class RegistryEventType(Enum):
    """Kinds of registry writes."""

    SESSION_WRITTEN = "session_written"
    SESSION_REMOVED = "session_removed"
    CHAT_STORE_UPDATED = "chat_store_updated"
    SPEECH_FACTORY_UPDATED = "speech_factory_updated"
    PENDING_SPEECH_UPDATED = "pending_speech_updated"
    LOG_CLEARED = "log_cleared"
    LOG_APPENDED = "log_appended"
    INSPECTOR_OBJECTS_SET = "inspector_objects_set"
    DOCUMENT_OPENED = "document_opened"
    DOCUMENT_CLOSED = "document_closed"


@dataclass
class RegistryEvent:
    """Record of a registry write."""

    type: RegistryEventType
    document_id: str
    value: Any = None


RegistryListener = Callable[[RegistryEvent], None]


class SessionRegistry:
    """Keyed store for chat sessions.

    Reads and writes are plain dictionary operations. Multi-step
    read-then-write spans take ``lock(document_id)``, which serializes
    work on one document without blocking others.

    Usage:
        registry = SessionRegistry.from_settings()
        registry.subscribe(ui_bridge.on_registry_event)

        async with registry.lock("doc-1"):
            session = registry.get_session("doc-1")
            ...
    """

    def __init__(
        self,
        server_url: str,
        custom_user_guid: str | None = None,
    ) -> None:
        self._server_url = server_url
        self._custom_user_guid = custom_user_guid

        self._sessions: dict[str, ChatSession] = {}
        self._chat_stores: dict[str, ChatStore | None] = {}
        self._speech_factories: dict[str, Any] = {}
        self._pending_speech: dict[str, bool] = {}
        self._logs: dict[str, list[Any]] = {}
        self._inspector_objects: dict[str, list[Any]] = {}
        self._documents: dict[str, Document] = {}

        self._locks: dict[str, asyncio.Lock] = {}
        self._listeners: list[RegistryListener] = []

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SessionRegistry":
        """Build a registry from application settings."""
        settings = settings or get_settings()
        return cls(
            server_url=settings.server_url,
            custom_user_guid=settings.custom_user_guid,
        )

    # -------------------------------------------------------------------------
    # Configuration selectors
    # -------------------------------------------------------------------------

    @property
    def server_url(self) -> str:
        """Emulator server base URL."""
        return self._server_url

    @property
    def custom_user_guid(self) -> str | None:
        """Configured fallback user identity."""
        return self._custom_user_guid

    # -------------------------------------------------------------------------
    # Locking and subscriptions
    # -------------------------------------------------------------------------

    def lock(self, document_id: str) -> asyncio.Lock:
        """Lock guarding read-then-write spans on one document.

        Locks are kept for every document id ever seen, including after
        ``remove_session``, so a coroutine still waiting on a released lock
        and a later caller always contend on the same lock. Growth is one
        lock per document opened in the emulator process.
        """
        lock = self._locks.get(document_id)
        if lock is None:
            lock = self._locks[document_id] = asyncio.Lock()
        return lock

    def subscribe(self, listener: RegistryListener) -> None:
        """Register a listener called after every write."""
        self._listeners.append(listener)

    def _emit(self, event_type: RegistryEventType, document_id: str, value: Any = None) -> None:
        event = RegistryEvent(type=event_type, document_id=document_id, value=value)
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                # A faulty UI listener must not break session sequencing
                logger.warning(
                    "registry_listener_failed",
                    event_type=event_type.value,
                    document_id=document_id,
                    error=str(e),
                )

    # -------------------------------------------------------------------------
    # Session selectors
    # -------------------------------------------------------------------------

    def get_session(self, document_id: str) -> ChatSession | None:
        """Session registered for a document."""
        return self._sessions.get(document_id)

    def get_conversation_id(self, document_id: str) -> str | None:
        """Conversation id of the session registered for a document."""
        session = self._sessions.get(document_id)
        return session.conversation_id if session else None

    def get_chat_store(self, document_id: str) -> ChatStore | None:
        return self._chat_stores.get(document_id)

    def get_speech_factory(self, document_id: str) -> Any:
        return self._speech_factories.get(document_id)

    def is_speech_pending(self, document_id: str) -> bool:
        return self._pending_speech.get(document_id, False)

    def get_log(self, document_id: str) -> list[Any]:
        return list(self._logs.get(document_id, []))

    def get_inspector_objects(self, document_id: str) -> list[Any]:
        return list(self._inspector_objects.get(document_id, []))

    def get_document(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    @property
    def active_count(self) -> int:
        """Number of registered sessions."""
        return len(self._sessions)

    def list_sessions(self) -> list[str]:
        """List document ids with a registered session."""
        return list(self._sessions.keys())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def write_session(self, session: ChatSession) -> None:
        """Install a session, replacing any previous one for the document.

        Raises:
            SessionError: If the replaced session still holds a live connection
        """
        previous = self._sessions.get(session.document_id)
        if (
            previous is not None
            and previous.connection is not None
            and previous.connection is not session.connection
            and not getattr(previous.connection, "ended", True)
        ):
            raise SessionError(
                "Previous connection must be ended before it is replaced",
                document_id=session.document_id,
            )
        self._sessions[session.document_id] = session
        self._emit(RegistryEventType.SESSION_WRITTEN, session.document_id, session)

    def remove_session(self, document_id: str) -> ChatSession | None:
        """Remove a session and its speech projections."""
        session = self._sessions.pop(document_id, None)
        self._speech_factories.pop(document_id, None)
        self._pending_speech.pop(document_id, None)
        self._chat_stores.pop(document_id, None)
        self._logs.pop(document_id, None)
        self._inspector_objects.pop(document_id, None)
        if session is not None:
            self._emit(RegistryEventType.SESSION_REMOVED, document_id, session)
        return session

    def set_chat_store(self, document_id: str, store: ChatStore | None) -> None:
        self._chat_stores[document_id] = store
        self._emit(RegistryEventType.CHAT_STORE_UPDATED, document_id, store)

    def set_speech_factory(self, document_id: str, factory: Any) -> None:
        self._speech_factories[document_id] = factory
        self._emit(RegistryEventType.SPEECH_FACTORY_UPDATED, document_id, factory)

    def set_pending_speech(self, document_id: str, pending: bool) -> None:
        self._pending_speech[document_id] = pending
        self._emit(RegistryEventType.PENDING_SPEECH_UPDATED, document_id, pending)

    def clear_log(self, document_id: str) -> None:
        self._logs[document_id] = []
        self._emit(RegistryEventType.LOG_CLEARED, document_id)

    def append_log(self, document_id: str, entry: Any) -> None:
        self._logs.setdefault(document_id, []).append(entry)
        self._emit(RegistryEventType.LOG_APPENDED, document_id, entry)

    def set_inspector_objects(self, document_id: str, objects: list[Any]) -> None:
        self._inspector_objects[document_id] = list(objects)
        self._emit(RegistryEventType.INSPECTOR_OBJECTS_SET, document_id, list(objects))

    def open_document(self, document: Document) -> None:
        self._documents[document.document_id] = document
        self._emit(RegistryEventType.DOCUMENT_OPENED, document.document_id, document)

    def close_document(self, document_id: str) -> None:
        document = self._documents.pop(document_id, None)
        self._emit(RegistryEventType.DOCUMENT_CLOSED, document_id, document)
