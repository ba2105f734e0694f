"""Speech module - speech credentials and factories."""

from bot_emulator.speech.provider import (
    CommandSpeechTokenProvider,
    SpeechAdapter,
    SpeechServicesFactory,
    SpeechTokenProvider,
)

__all__ = [
    "CommandSpeechTokenProvider",
    "SpeechAdapter",
    "SpeechServicesFactory",
    "SpeechTokenProvider",
]
