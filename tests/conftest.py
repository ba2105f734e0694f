"""Pytest configuration and shared fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before importing settings
os.environ.update({
    "SERVER_URL": "http://localhost:52673",
    "CUSTOM_USER_GUID": "someUserId",
    "ENVIRONMENT": "development",
    "METRICS_ENABLED": "true",
    "SPEECH_REGION": "westus",
})


def make_response(
    status_code: int = 200,
    json: object | None = None,
    reason_phrase: str | None = None,
) -> httpx.Response:
    """Build an httpx response, optionally with a custom status text."""
    extensions = {}
    if reason_phrase is not None:
        extensions["reason_phrase"] = reason_phrase.encode("ascii")
    return httpx.Response(status_code, json=json, extensions=extensions)


@pytest.fixture
def test_settings():
    """Provide test settings instance."""
    from bot_emulator.config.settings import Settings
    return Settings(
        _env_file=None,
        server_url="http://localhost:52673",
        custom_user_guid="someUserId",
        speech_region="westus",
        speech_token_timeout_s=1.0,
    )


@pytest.fixture
def registry(test_settings):
    """Provide an empty session registry."""
    from bot_emulator.state.registry import SessionRegistry
    return SessionRegistry.from_settings(test_settings)


@pytest.fixture
def events(registry):
    """Record every registry write in order."""
    recorded = []
    registry.subscribe(recorded.append)
    return recorded


@pytest.fixture
def conversations():
    """Provide a mock conversation service answering with successes."""
    from bot_emulator.transport.conversation import ConversationService
    service = AsyncMock(spec=ConversationService)
    service.start_conversation.return_value = make_response(
        200, json={"conversationId": "someConvoId", "endpointId": "someEndpointId"}
    )
    service.update_conversation.return_value = make_response(
        200,
        json={
            "botEndpoint": {
                "id": "botEndpointId",
                "botUrl": "http://localhost:3978",
                "msaAppId": "someAppId",
                "msaPassword": "someAppPw",
            },
            "members": [{"id": "someUserId", "name": "User", "role": "user"}],
        },
    )
    service.feed_activities_as_transcript.return_value = make_response(200)
    service.send_activity_to_bot.return_value = make_response(200)
    service.send_initial_log_report.return_value = make_response(200)
    return service


@pytest.fixture
def commands():
    """Provide a mock host command transport."""
    service = MagicMock()
    service.remote_call = AsyncMock(return_value=None)
    return service


@pytest.fixture
def speech():
    """Provide a mock speech token provider."""
    provider = MagicMock()
    provider.fetch_token = AsyncMock(return_value="speech-token")
    provider.create_speech_factory = AsyncMock(return_value="speech-factory")
    return provider


@pytest_asyncio.fixture
async def orchestrator(registry, conversations, commands, speech, test_settings):
    """Provide an orchestrator wired to mocks; pipelines are cancelled on teardown."""
    from bot_emulator.orchestrator.chat import ChatOrchestrator
    orchestrator = ChatOrchestrator(
        registry=registry,
        conversations=conversations,
        commands=commands,
        speech=speech,
        settings=test_settings,
    )
    yield orchestrator
    await orchestrator.aclose()


@pytest.fixture
def http_response():
    """Provide the response builder."""
    return make_response
