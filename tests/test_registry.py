"""Tests for Session Registry.

Tests cover:
- Selectors for sessions and projections
- Event emission on writes
- Connection guard on session replacement
- Per-document locks
- Listener failures
"""

import pytest
from unittest.mock import MagicMock

from bot_emulator.exceptions import SessionError
from bot_emulator.orchestrator.connection import create_direct_line
from bot_emulator.state.registry import (
    ChatMode,
    ChatSession,
    Document,
    RegistryEventType,
    SessionRegistry,
    create_chat_store,
)


def make_session(document_id="doc", conversation_id="c1", connection=None):
    return ChatSession(
        document_id=document_id,
        conversation_id=conversation_id,
        mode=ChatMode.LIVECHAT,
        user_id="u1",
        connection=connection,
    )


class TestSelectors:
    """Tests for registry reads."""

    def test_configuration(self, registry):
        """Server URL and user GUID come from settings."""
        assert registry.server_url == "http://localhost:52673"
        assert registry.custom_user_guid == "someUserId"

    def test_empty_registry(self, registry):
        """Unknown documents have no state."""
        assert registry.get_session("doc") is None
        assert registry.get_conversation_id("doc") is None
        assert registry.get_chat_store("doc") is None
        assert registry.get_speech_factory("doc") is None
        assert registry.is_speech_pending("doc") is False
        assert registry.get_log("doc") == []
        assert registry.get_inspector_objects("doc") == []
        assert registry.active_count == 0

    def test_conversation_id_lookup(self, registry):
        """Conversation id is read from the registered session."""
        registry.write_session(make_session())

        assert registry.get_conversation_id("doc") == "c1"
        assert registry.list_sessions() == ["doc"]
        assert registry.active_count == 1


class TestWrites:
    """Tests for registry writes and events."""

    def test_events_in_order(self, registry, events):
        """Each write emits one event carrying its value."""
        store = create_chat_store()
        registry.set_chat_store("doc", store)
        registry.set_pending_speech("doc", True)
        registry.set_speech_factory("doc", "factory")
        registry.append_log("doc", "entry")
        registry.clear_log("doc")
        registry.set_inspector_objects("doc", [{"a": 1}])

        assert [e.type for e in events] == [
            RegistryEventType.CHAT_STORE_UPDATED,
            RegistryEventType.PENDING_SPEECH_UPDATED,
            RegistryEventType.SPEECH_FACTORY_UPDATED,
            RegistryEventType.LOG_APPENDED,
            RegistryEventType.LOG_CLEARED,
            RegistryEventType.INSPECTOR_OBJECTS_SET,
        ]
        assert events[0].value is store
        assert all(e.document_id == "doc" for e in events)

    def test_documents(self, registry, events):
        """Opening and closing documents is tracked."""
        document = Document(document_id="doc", content_type="text/plain", file_name="a.txt")
        registry.open_document(document)
        assert registry.get_document("doc") is document

        registry.close_document("doc")
        assert registry.get_document("doc") is None
        assert events[-1].type is RegistryEventType.DOCUMENT_CLOSED
        assert events[-1].value is document

    def test_remove_session_drops_projections(self, registry):
        """Removing a session drops its speech and store projections."""
        registry.write_session(make_session())
        registry.set_speech_factory("doc", "factory")
        registry.set_pending_speech("doc", True)
        registry.set_chat_store("doc", create_chat_store())

        removed = registry.remove_session("doc")

        assert removed.conversation_id == "c1"
        assert registry.get_session("doc") is None
        assert registry.get_speech_factory("doc") is None
        assert registry.is_speech_pending("doc") is False
        assert registry.get_chat_store("doc") is None

    def test_remove_missing_session(self, registry, events):
        """Removing an unknown session emits nothing."""
        assert registry.remove_session("doc") is None
        assert events == []

    def test_replace_requires_ended_connection(self, registry):
        """A live connection cannot be silently replaced."""
        live = create_direct_line("http://x", "c1", ChatMode.LIVECHAT, None, "u1")
        registry.write_session(make_session(connection=live))

        with pytest.raises(SessionError):
            registry.write_session(make_session(conversation_id="c2"))

        live.end()
        registry.write_session(make_session(conversation_id="c2"))
        assert registry.get_conversation_id("doc") == "c2"

    def test_listener_failure_is_contained(self, registry):
        """A failing listener does not stop other listeners or the write."""
        failing = MagicMock(side_effect=RuntimeError("ui broke"))
        recorded = []
        registry.subscribe(failing)
        registry.subscribe(recorded.append)

        registry.set_pending_speech("doc", True)

        failing.assert_called_once()
        assert len(recorded) == 1
        assert registry.is_speech_pending("doc") is True


class TestLocks:
    """Tests for per-document locks."""

    def test_same_lock_per_document(self, registry):
        """A document always maps to the same lock."""
        assert registry.lock("doc") is registry.lock("doc")

    def test_distinct_locks(self, registry):
        """Different documents do not share a lock."""
        assert registry.lock("doc1") is not registry.lock("doc2")

    def test_lock_survives_session_removal(self, registry):
        """Removing a session keeps its lock so waiters and new callers share it."""
        lock = registry.lock("doc")
        registry.write_session(make_session())

        registry.remove_session("doc")

        assert registry.lock("doc") is lock

    @pytest.mark.asyncio
    async def test_lock_is_exclusive(self, registry):
        """Holding one document's lock leaves others free."""
        async with registry.lock("doc1"):
            assert registry.lock("doc1").locked()
            assert not registry.lock("doc2").locked()


class TestFromSettings:
    """Tests for SessionRegistry.from_settings."""

    def test_from_settings(self, test_settings):
        registry = SessionRegistry.from_settings(test_settings)
        assert registry.server_url == test_settings.server_url
