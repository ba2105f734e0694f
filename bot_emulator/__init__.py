"""Bot Emulator - Chat session orchestration core."""

__version__ = "1.0.0"

# Export exception hierarchy for easy importing
from bot_emulator.exceptions import (
    EmulatorError,
    SessionError,
    SessionNotFoundError,
    ConfigurationError,
    InvalidConfigError,
    TransportError,
    ConversationRequestError,
    SpeechError,
    SpeechTokenError,
    ActionError,
    UnknownActionError,
)

__all__ = [
    "__version__",
    # Base
    "EmulatorError",
    # Session
    "SessionError",
    "SessionNotFoundError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    # Transport
    "TransportError",
    "ConversationRequestError",
    # Speech
    "SpeechError",
    "SpeechTokenError",
    # Actions
    "ActionError",
    "UnknownActionError",
]
