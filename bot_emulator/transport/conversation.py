"""Conversation Service - HTTP client for the emulator conversation server.

Wraps the emulator server routes used by the chat core:
- Start a conversation
- Update a conversation's identity (restart)
- Feed activities as a transcript
- Send an activity to the bot
- Send the initial log report

Responses are returned as-is; callers decide what a non-success status means.
"""

from __future__ import annotations

from typing import Any, TypedDict

import httpx

from bot_emulator.config.settings import get_settings


class StartConversationPayload(TypedDict):
    """Body of a start-conversation request."""

    botUrl: str
    channelServiceType: str
    members: list[dict[str, Any]]
    mode: str
    msaAppId: str
    msaPassword: str


class UpdateConversationPayload(TypedDict):
    """Body of an update-conversation request."""

    conversationId: str
    userId: str


class ConversationService:
    """Async client for emulator conversation routes.

    Usage:
        async with ConversationService() as service:
            response = await service.start_conversation(server_url, payload)
            if response.is_success:
                body = response.json()
    """

    def __init__(
        self,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if timeout_s is None:
            timeout_s = get_settings().request_timeout_s
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Underlying HTTP client, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ConversationService:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def start_conversation(
        self,
        server_url: str,
        payload: StartConversationPayload,
    ) -> httpx.Response:
        """Start a conversation; body carries conversationId and endpointId."""
        return await self.client.post(
            f"{server_url}/emulator/conversations",
            json=payload,
        )

    async def update_conversation(
        self,
        server_url: str,
        conversation_id: str,
        payload: UpdateConversationPayload,
    ) -> httpx.Response:
        """Re-key a conversation; ``conversation_id`` is the current (routing) id."""
        return await self.client.put(
            f"{server_url}/emulator/{conversation_id}",
            json=payload,
        )

    async def feed_activities_as_transcript(
        self,
        server_url: str,
        conversation_id: str,
        activities: list[dict[str, Any]],
    ) -> httpx.Response:
        """Replay recorded activities into a conversation."""
        return await self.client.post(
            f"{server_url}/emulator/{conversation_id}/transcript",
            json=activities,
        )

    async def send_activity_to_bot(
        self,
        server_url: str,
        conversation_id: str,
        activity: dict[str, Any],
    ) -> httpx.Response:
        """Send a single activity to the bot on behalf of the user."""
        return await self.client.post(
            f"{server_url}/emulator/{conversation_id}/sendactivity",
            json=activity,
        )

    async def send_initial_log_report(
        self,
        server_url: str,
        conversation_id: str,
        bot_url: str,
    ) -> httpx.Response:
        """Ask the server to log its initial report for the conversation."""
        return await self.client.post(
            f"{server_url}/emulator/{conversation_id}/invoke/initialReport",
            json=bot_url,
        )
