"""Speech Token Provider - Credentials and factories for speech services.

A speech factory is handed to the chat widget; given audio needs it
produces a speech adapter bound to a short-lived authorization token.
The token is fetched by the host process for the session's bot endpoint.

Reference: Cognitive Services speech ponyfill factory
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Protocol

from bot_emulator.exceptions import SpeechTokenError
from bot_emulator.transport.commands import CommandService, Commands


@dataclass
class SpeechAdapter:
    """Speech I/O adapter bound to a resolved credential."""

    region: str
    authorization_token: str
    audio_config: Any = None


class SpeechServicesFactory:
    """Builds speech adapters once the authorization token resolves.

    The token is awaited lazily so the factory can be handed to the UI
    before the credential exists.
    """

    def __init__(self, authorization_token: Awaitable[str], region: str) -> None:
        self._authorization_token = authorization_token
        self._region = region
        self._token: str | None = None

    @property
    def region(self) -> str:
        return self._region

    async def get_token(self) -> str:
        """Resolve the authorization token (once)."""
        if self._token is None:
            self._token = await self._authorization_token
        return self._token

    async def create(self, audio_config: Any = None) -> SpeechAdapter:
        """Create an adapter for the given audio configuration."""
        return SpeechAdapter(
            region=self._region,
            authorization_token=await self.get_token(),
            audio_config=audio_config,
        )


class SpeechTokenProvider(Protocol):
    """Protocol for speech credential sources."""

    async def fetch_token(self, endpoint_id: str | None) -> str:
        """Fetch a speech authorization token for a bot endpoint."""
        ...

    async def create_speech_factory(
        self,
        authorization_token: Awaitable[str],
        region: str,
    ) -> Any:
        """Build a speech factory around a deferred token."""
        ...


class CommandSpeechTokenProvider:
    """Speech token provider backed by the host command transport.

    Usage:
        provider = CommandSpeechTokenProvider(command_service)
        token = asyncio.ensure_future(provider.fetch_token(endpoint_id))
        factory = await provider.create_speech_factory(token, "westus")
    """

    def __init__(self, commands: CommandService, refresh: bool = False) -> None:
        self._commands = commands
        self._refresh = refresh

    async def fetch_token(self, endpoint_id: str | None) -> str:
        """Fetch a token from the host process.

        Raises:
            SpeechTokenError: If the host returns no usable token
        """
        result = await self._commands.remote_call(
            Commands.GET_SPEECH_TOKEN,
            endpoint_id,
            self._refresh,
        )
        if isinstance(result, dict):
            result = result.get("access_Token") or result.get("accessToken")
        if not result or not isinstance(result, str):
            raise SpeechTokenError(endpoint_id, "host returned no token")
        return result

    async def create_speech_factory(
        self,
        authorization_token: Awaitable[str],
        region: str,
    ) -> SpeechServicesFactory:
        return SpeechServicesFactory(
            authorization_token=asyncio.ensure_future(authorization_token),
            region=region,
        )
