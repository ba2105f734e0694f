"""Chat core lifespan for the host process.

Usage:
    async with chat_core(commands) as orchestrator:
        table = build_action_table(orchestrator)
        await dispatch(table, "CHAT/OPEN_TRANSCRIPT", {"filename": path})
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from pydantic import ValidationError

from bot_emulator import __version__
from bot_emulator.config.settings import Settings, get_settings
from bot_emulator.exceptions import InvalidConfigError
from bot_emulator.observability.logging import init_logging
from bot_emulator.orchestrator.chat import ChatOrchestrator, create_chat_orchestrator
from bot_emulator.speech.provider import SpeechTokenProvider
from bot_emulator.transport.commands import CommandService

logger = structlog.get_logger(__name__)


def load_settings() -> Settings:
    """Load settings, reporting the first validation failure.

    Raises:
        InvalidConfigError: If a configured value fails validation
    """
    try:
        return get_settings()
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"]) or "settings"
        raise InvalidConfigError(key, error.get("input"), error["msg"]) from e


@asynccontextmanager
async def chat_core(
    commands: CommandService,
    settings: Settings | None = None,
    speech: SpeechTokenProvider | None = None,
) -> AsyncGenerator[ChatOrchestrator, None]:
    """Configure logging, build the orchestrator and close it on exit."""
    settings = settings or load_settings()
    init_logging(json_format=settings.log_json, level=settings.log_level)
    logger.info(
        "chat_core_starting",
        version=__version__,
        environment=settings.environment,
        server_url=settings.server_url,
    )

    orchestrator = create_chat_orchestrator(commands, settings=settings, speech=speech)
    try:
        yield orchestrator
    finally:
        logger.info("chat_core_shutting_down", sessions=orchestrator.registry.active_count)
        await orchestrator.aclose()
        logger.info("chat_core_shutdown_complete")
