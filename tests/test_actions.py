"""Tests for Chat Actions.

Tests cover:
- Registration table contents and order
- Dispatch by enum and by string
- Keyword payloads reach the handler
- Unknown actions
"""

import pytest

from bot_emulator.exceptions import UnknownActionError
from bot_emulator.orchestrator.actions import ChatAction, build_action_table, dispatch
from bot_emulator.transport.commands import Commands


class TestActionTable:
    """Tests for build_action_table."""

    @pytest.mark.asyncio
    async def test_every_action_registered(self, orchestrator):
        """Each chat action maps to its orchestrator handler, in order."""
        table = build_action_table(orchestrator)

        assert list(table) == [
            ChatAction.SHOW_CONTEXT_MENU_FOR_ACTIVITY,
            ChatAction.CLOSE_CONVERSATION,
            ChatAction.RESTART_CONVERSATION,
            ChatAction.OPEN_TRANSCRIPT,
        ]
        assert table[ChatAction.CLOSE_CONVERSATION] == orchestrator.close_conversation
        assert table[ChatAction.OPEN_TRANSCRIPT] == orchestrator.new_transcript


class TestDispatch:
    """Tests for dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_open_transcript(self, orchestrator, registry):
        """Dispatching by string opens a transcript."""
        table = build_action_table(orchestrator)

        session = await dispatch(table, "CHAT/OPEN_TRANSCRIPT", {"filename": "chat.transcript"})
        await orchestrator.wait_for_speech(session.document_id)

        assert registry.get_session("someConvoId") is session

    @pytest.mark.asyncio
    async def test_dispatch_restart_payload(self, orchestrator, registry, conversations):
        """Restart flags are passed as keywords."""
        table = build_action_table(orchestrator)
        await orchestrator.bootstrap_chat("doc", "livechat", "c1", None, "u1")

        session = await dispatch(
            table,
            ChatAction.RESTART_CONVERSATION,
            {"document_id": "doc", "require_new_user_id": True},
        )
        await orchestrator.wait_for_speech("doc")

        body = conversations.update_conversation.await_args.args[2]
        assert body["conversationId"] == "c1"
        assert body["userId"] != "u1"
        assert registry.get_session("doc") is session

    @pytest.mark.asyncio
    async def test_dispatch_close(self, orchestrator, registry, commands):
        """Close removes the session and deletes the remote conversation."""
        table = build_action_table(orchestrator)
        await orchestrator.bootstrap_chat("doc", "livechat", "c1", None, "u1")
        await orchestrator.wait_for_speech("doc")

        assert await dispatch(table, ChatAction.CLOSE_CONVERSATION, {"document_id": "doc"})

        assert registry.get_session("doc") is None
        commands.remote_call.assert_awaited_with(Commands.DELETE_CONVERSATION, "doc")

    @pytest.mark.asyncio
    async def test_unknown_action_string(self, orchestrator):
        """Unrecognized action names raise UnknownActionError."""
        table = build_action_table(orchestrator)

        with pytest.raises(UnknownActionError) as exc_info:
            await dispatch(table, "CHAT/DOES_NOT_EXIST")

        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True

    @pytest.mark.asyncio
    async def test_missing_handler(self, orchestrator):
        """Actions absent from the table raise UnknownActionError."""
        table = build_action_table(orchestrator)
        del table[ChatAction.OPEN_TRANSCRIPT]

        with pytest.raises(UnknownActionError):
            await dispatch(table, ChatAction.OPEN_TRANSCRIPT, {"filename": "x"})
