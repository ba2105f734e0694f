"""Chat Orchestrator - Sequencing for chat session lifecycle.

Coordinates the collaborators of a chat session:
- Session registry (UI-facing state)
- Conversation server (start, update, transcript feed, activities)
- Host command transport (context menu, clipboard, file parsing, delete)
- Speech token provider (detached speech factory pipeline)

Each operation runs its steps strictly in order; every collaborator call
is an await point. A session's connection is always ended inside the
operation that replaces or removes it.
"""

from __future__ import annotations

import asyncio
import json
import time
from functools import partial
from typing import Any, Callable

import httpx

from bot_emulator.config.constants import EMULATOR
from bot_emulator.config.settings import Settings, get_settings
from bot_emulator.exceptions import ConversationRequestError, SessionNotFoundError
from bot_emulator.observability.logging import ChatSessionLogger, get_logger
from bot_emulator.observability.metrics import (
    record_request_failure,
    record_session_closed,
    record_session_created,
    record_session_restarted,
    record_speech_factory,
    record_transcript_opened,
    update_active_sessions,
)
from bot_emulator.orchestrator.connection import ConnectionFactory, create_direct_line
from bot_emulator.speech.provider import CommandSpeechTokenProvider, SpeechTokenProvider
from bot_emulator.state.registry import (
    ChatMode,
    ChatSession,
    ChatStore,
    Document,
    SessionRegistry,
    create_chat_store,
)
from bot_emulator.transport.commands import CommandService, Commands
from bot_emulator.transport.conversation import ConversationService
from bot_emulator.utils.async_timeout import with_timeout
from bot_emulator.utils.ids import unique_id, unique_id_v4

logger = get_logger(__name__)


class ChatOrchestrator:
    """Chat session state machine.

    Session states: Uninitialized -> Active (bootstrap_chat),
    Active -> Active (restart_conversation), Active -> Closed
    (close_conversation).

    Usage:
        orchestrator = create_chat_orchestrator(commands)

        session = await orchestrator.new_transcript("chat.transcript")
        await orchestrator.restart_conversation(session.document_id, True, False)
        await orchestrator.close_conversation(session.document_id)

        await orchestrator.aclose()
    """

    def __init__(
        self,
        registry: SessionRegistry,
        conversations: ConversationService,
        commands: CommandService,
        speech: SpeechTokenProvider,
        connection_factory: ConnectionFactory | None = None,
        chat_store_factory: Callable[[], ChatStore] = create_chat_store,
        settings: Settings | None = None,
    ) -> None:
        self._registry = registry
        self._conversations = conversations
        self._commands = commands
        self._speech = speech
        self._connection_factory = connection_factory or self._create_direct_line
        self._chat_store_factory = chat_store_factory
        self._settings = settings or get_settings()

        # Speech pipelines keyed by document. Generations are never reset, so a
        # re-created document cannot accept a write-back from an older pipeline.
        self._speech_tasks: dict[str, asyncio.Task] = {}
        self._speech_generations: dict[str, int] = {}
        # Every pipeline task and token future still running, including
        # pipelines superseded by a restart. aclose() cancels all of them.
        self._background: set[asyncio.Future] = set()

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def bootstrap_chat(
        self,
        document_id: str,
        mode: ChatMode | str,
        conversation_id: str,
        endpoint_id: str | None,
        user_id: str,
    ) -> ChatSession:
        """Create the session for a document and start speech retrieval.

        Returns once the session is registered; the speech factory is
        written later by a detached task.
        """
        mode = ChatMode(mode)
        registry = self._registry

        async with registry.lock(document_id):
            previous = registry.get_session(document_id)
            if previous is not None:
                self._end_connection(previous)

            registry.set_chat_store(document_id, self._chat_store_factory())
            registry.set_speech_factory(document_id, None)
            registry.set_pending_speech(document_id, True)
            generation = self._next_generation(document_id)

            try:
                connection = self._connection_factory(conversation_id, mode, endpoint_id, user_id)
            except Exception:
                registry.set_pending_speech(document_id, False)
                raise

            session = ChatSession(
                document_id=document_id,
                conversation_id=conversation_id,
                mode=mode,
                user_id=user_id,
                endpoint_id=endpoint_id,
                connection=connection,
            )
            registry.write_session(session)

        self._spawn_speech_pipeline(document_id, endpoint_id, generation)

        ChatSessionLogger(document_id).session_created(
            conversation_id=conversation_id,
            mode=mode.value,
            metadata={"endpoint_id": endpoint_id},
        )
        if self._settings.metrics_enabled:
            record_session_created(mode.value)
            update_active_sessions(registry.active_count)
        return session

    async def close_conversation(self, document_id: str) -> bool:
        """Tear down a document's session and delete it on the server.

        Returns:
            True if a session existed and was closed
        """
        registry = self._registry

        async with registry.lock(document_id):
            conversation_id = registry.get_conversation_id(document_id)
            session = registry.get_session(document_id)
            if session is None:
                logger.debug("close_without_session", document_id=document_id)
                return False

            self._next_generation(document_id)
            self._end_connection(session)
            registry.close_document(document_id)
            registry.set_chat_store(document_id, None)
            if registry.is_speech_pending(document_id):
                registry.set_pending_speech(document_id, False)
            registry.remove_session(document_id)

        await self._commands.remote_call(Commands.DELETE_CONVERSATION, document_id)

        ChatSessionLogger(document_id).session_closed(conversation_id)
        if self._settings.metrics_enabled:
            record_session_closed()
            update_active_sessions(registry.active_count)
        return True

    async def restart_conversation(
        self,
        document_id: str,
        require_new_conversation_id: bool = False,
        require_new_user_id: bool = False,
    ) -> ChatSession:
        """Rebuild a document's session with fresh or reused identity.

        Raises:
            SessionNotFoundError: If the document has no session
            ConversationRequestError: If the server rejects the update
        """
        registry = self._registry
        log = ChatSessionLogger(document_id)

        async with registry.lock(document_id):
            session = registry.get_session(document_id)
            if session is None:
                raise SessionNotFoundError(document_id)
            server_url = registry.server_url

            self._end_connection(session)
            registry.clear_log(document_id)
            registry.set_inspector_objects(document_id, [])
            registry.set_chat_store(document_id, self._chat_store_factory())
            registry.set_speech_factory(document_id, None)
            if registry.is_speech_pending(document_id):
                registry.set_pending_speech(document_id, False)
            generation = self._next_generation(document_id)

            mode = session.mode
            if require_new_conversation_id:
                conversation_id = f"{unique_id()}|{mode.value}"
            else:
                conversation_id = session.conversation_id
            user_id = unique_id_v4() if require_new_user_id else session.user_id

            response = await self._conversations.update_conversation(
                server_url,
                session.conversation_id,
                {"conversationId": conversation_id, "userId": user_id},
            )
            if not response.is_success:
                self._raise_request_error(document_id, "updating a conversation", response)

            body = response.json()
            bot_endpoint = body.get("botEndpoint") or {}
            members = body.get("members") or []
            endpoint_id = bot_endpoint.get("id")

            connection = self._connection_factory(conversation_id, mode, endpoint_id, user_id)
            restarted = ChatSession(
                document_id=document_id,
                conversation_id=conversation_id,
                mode=mode,
                user_id=user_id,
                endpoint_id=endpoint_id,
                connection=connection,
            )
            registry.write_session(restarted)

            report = await self._conversations.send_initial_log_report(
                server_url,
                conversation_id,
                bot_endpoint.get("botUrl"),
            )
            if not report.is_success:
                logger.warning(
                    "initial_log_report_failed",
                    document_id=document_id,
                    conversation_id=conversation_id,
                    status=report.status_code,
                )
            await self.send_initial_activity(conversation_id, members, mode)

            registry.set_pending_speech(document_id, True)

        self._spawn_speech_pipeline(document_id, endpoint_id, generation)

        log.session_restarted(
            old_conversation_id=session.conversation_id,
            conversation_id=conversation_id,
            new_user=require_new_user_id,
        )
        if self._settings.metrics_enabled:
            record_session_restarted(require_new_conversation_id, require_new_user_id)
        return restarted

    # -------------------------------------------------------------------------
    # Transcripts
    # -------------------------------------------------------------------------

    async def new_transcript(self, filename: str) -> ChatSession:
        """Start a transcript conversation and replay a file into it.

        The document id of a transcript session is its conversation id.
        Nothing is retried; on failure an already opened document stays open.

        Raises:
            ConversationRequestError: If starting the conversation or
                feeding the activities is rejected by the server
        """
        registry = self._registry
        server_url = registry.server_url
        user = {
            "id": registry.custom_user_guid or unique_id_v4(),
            "name": EMULATOR.DEFAULT_USER_NAME,
            "role": EMULATOR.DEFAULT_USER_ROLE,
        }

        response = await self._conversations.start_conversation(
            server_url,
            {
                "botUrl": "",
                "channelServiceType": "",
                "members": [user],
                "mode": ChatMode.TRANSCRIPT.value,
                "msaAppId": "",
                "msaPassword": "",
            },
        )
        if not response.is_success:
            self._raise_request_error(None, "starting a new conversation", response)

        body = response.json()
        conversation_id = body["conversationId"]
        endpoint_id = body.get("endpointId")

        extracted = await self._commands.remote_call(
            Commands.EXTRACT_ACTIVITIES_FROM_FILE,
            filename,
        )
        activities = (extracted or {}).get("activities") or []

        session = await self.bootstrap_chat(
            document_id=conversation_id,
            mode=ChatMode.TRANSCRIPT,
            conversation_id=conversation_id,
            endpoint_id=endpoint_id,
            user_id=user["id"],
        )

        registry.open_document(
            Document(
                document_id=conversation_id,
                content_type=EMULATOR.CONTENT_TYPE_TRANSCRIPT,
                file_name=filename,
                is_global=False,
            )
        )

        response = await self._conversations.feed_activities_as_transcript(
            server_url,
            conversation_id,
            activities,
        )
        if not response.is_success:
            self._raise_request_error(
                conversation_id, "feeding activities as a transcript", response
            )

        ChatSessionLogger(conversation_id).transcript_opened(filename, len(activities))
        if self._settings.metrics_enabled:
            record_transcript_opened()
        return session

    # -------------------------------------------------------------------------
    # Activities
    # -------------------------------------------------------------------------

    async def send_initial_activity(
        self,
        conversation_id: str,
        members: list[dict[str, Any]],
        mode: ChatMode | str,
    ) -> dict[str, Any]:
        """Send the first activity of a conversation.

        Debug sessions open the bot inspector; every other mode announces
        the conversation members.

        Returns:
            The activity that was sent
        """
        server_url = self._registry.server_url

        if ChatMode(mode) is ChatMode.DEBUG:
            activity: dict[str, Any] = {
                "type": "message",
                "text": EMULATOR.INSPECT_OPEN_TEXT,
            }
        else:
            activity = {
                "type": "conversationUpdate",
                "membersAdded": members,
                "membersRemoved": [],
            }

        response = await self._conversations.send_activity_to_bot(
            server_url,
            conversation_id,
            activity,
        )
        if not response.is_success:
            logger.warning(
                "initial_activity_rejected",
                conversation_id=conversation_id,
                status=response.status_code,
                status_text=response.reason_phrase,
            )
        return activity

    async def show_context_menu_for_activity(self, activity: dict[str, Any]) -> bool:
        """Offer copy actions for an activity and copy the chosen form.

        Returns:
            True if something was written to the clipboard
        """
        menu_items = [
            {"label": label, "id": item_id}
            for label, item_id in EMULATOR.CONTEXT_MENU_ITEMS
        ]
        selection = await self._commands.remote_call(
            Commands.DISPLAY_CONTEXT_MENU,
            menu_items,
        )
        selected = selection.get("id") if isinstance(selection, dict) else None

        if selected == "copy":
            text = activity.get("text") or ""
        elif selected == "json":
            text = json.dumps(activity, indent=2)
        else:
            return False

        await self._commands.remote_call(Commands.WRITE_CLIPBOARD_TEXT, text)
        return True

    # -------------------------------------------------------------------------
    # Speech factory pipeline
    # -------------------------------------------------------------------------

    async def wait_for_speech(self, document_id: str) -> None:
        """Wait for the outstanding speech pipeline of a document, if any."""
        task = self._speech_tasks.get(document_id)
        if task is not None:
            await asyncio.shield(task)

    def speech_generation(self, document_id: str) -> int:
        """Current speech generation of a document (0 if never created)."""
        return self._speech_generations.get(document_id, 0)

    def _next_generation(self, document_id: str) -> int:
        generation = self._speech_generations.get(document_id, 0) + 1
        self._speech_generations[document_id] = generation
        return generation

    def _spawn_speech_pipeline(
        self,
        document_id: str,
        endpoint_id: str | None,
        generation: int,
    ) -> None:
        task = asyncio.create_task(
            self._run_speech_pipeline(document_id, endpoint_id, generation),
            name=f"speech-factory:{document_id}:{generation}",
        )
        self._speech_tasks[document_id] = task
        self._track(task)
        task.add_done_callback(partial(self._forget_speech_task, document_id))

    def _forget_speech_task(self, document_id: str, task: asyncio.Task) -> None:
        if self._speech_tasks.get(document_id) is task:
            del self._speech_tasks[document_id]

    def _track(self, future: asyncio.Future) -> None:
        self._background.add(future)
        future.add_done_callback(self._background.discard)

    async def _run_speech_pipeline(
        self,
        document_id: str,
        endpoint_id: str | None,
        generation: int,
    ) -> None:
        """Fetch a speech factory and write it back if still current.

        Failures end here: they are logged and clear the pending flag.
        """
        registry = self._registry
        log = ChatSessionLogger(document_id)
        started = time.monotonic()
        token: asyncio.Future | None = None

        try:
            previous = registry.get_speech_factory(document_id)
            token = asyncio.ensure_future(self._fetch_speech_token(endpoint_id))
            self._track(token)
            token.add_done_callback(partial(self._log_token_failure, document_id))
            factory = await self._speech.create_speech_factory(
                token,
                self._settings.speech_region,
            )
        except asyncio.CancelledError:
            if token is not None:
                token.cancel()
            raise
        except Exception as e:
            if token is not None:
                token.cancel()
            log.speech_factory_failed(generation, str(e))
            if self._settings.metrics_enabled:
                record_speech_factory("failed")
            async with registry.lock(document_id):
                if self.speech_generation(document_id) == generation:
                    registry.set_pending_speech(document_id, False)
            return

        async with registry.lock(document_id):
            current = self.speech_generation(document_id)
            if current != generation:
                log.speech_factory_discarded(generation, current)
                if self._settings.metrics_enabled:
                    record_speech_factory("discarded")
                return
            registry.set_speech_factory(document_id, factory)
            registry.set_pending_speech(document_id, False)

        log.speech_factory_updated(generation, replaced=previous is not None)
        if self._settings.metrics_enabled:
            record_speech_factory("updated", time.monotonic() - started)

    async def _fetch_speech_token(self, endpoint_id: str | None) -> str:
        return await with_timeout(
            self._speech.fetch_token(endpoint_id),
            timeout_s=self._settings.speech_token_timeout_s,
            operation="speech token fetch",
        )

    def _log_token_failure(self, document_id: str, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning(
                "speech_token_failed",
                document_id=document_id,
                error=str(error),
            )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _create_direct_line(
        self,
        conversation_id: str,
        mode: ChatMode,
        endpoint_id: str | None,
        user_id: str,
    ):
        return create_direct_line(
            self._registry.server_url,
            conversation_id,
            mode,
            endpoint_id,
            user_id,
        )

    @staticmethod
    def _end_connection(session: ChatSession) -> None:
        if session.connection is not None:
            session.connection.end()

    def _raise_request_error(
        self,
        document_id: str | None,
        operation: str,
        response: httpx.Response,
    ) -> None:
        error = ConversationRequestError(
            operation=operation,
            status=response.status_code,
            status_text=response.reason_phrase,
        )
        ChatSessionLogger(document_id or "-").request_failed(
            operation, error.status, error.status_text
        )
        if self._settings.metrics_enabled:
            record_request_failure(operation, error.status)
        raise error

    async def aclose(self) -> None:
        """Cancel outstanding speech pipelines and close the HTTP client."""
        pending = list(self._background)
        for future in pending:
            future.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for document_id in self._speech_generations:
            if self._registry.is_speech_pending(document_id):
                self._registry.set_pending_speech(document_id, False)
        await self._conversations.aclose()


def create_chat_orchestrator(
    commands: CommandService,
    settings: Settings | None = None,
    speech: SpeechTokenProvider | None = None,
) -> ChatOrchestrator:
    """Create a chat orchestrator wired to the configured emulator server.

    Args:
        commands: Host command transport
        settings: Application settings (cached settings by default)
        speech: Speech token provider (host-backed by default)

    Returns:
        Configured ChatOrchestrator
    """
    settings = settings or get_settings()
    return ChatOrchestrator(
        registry=SessionRegistry.from_settings(settings),
        conversations=ConversationService(timeout_s=settings.request_timeout_s),
        commands=commands,
        speech=speech or CommandSpeechTokenProvider(commands),
        settings=settings,
    )
