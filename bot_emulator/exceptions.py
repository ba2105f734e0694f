"""Bot Emulator Exception Hierarchy.

Provides structured exception classes for the chat session core.

Hierarchy:
    EmulatorError (base)
    ├── SessionError
    │   └── SessionNotFoundError
    ├── ConfigurationError
    │   └── InvalidConfigError
    ├── TransportError
    │   └── ConversationRequestError
    ├── SpeechError
    │   └── SpeechTokenError
    └── ActionError
        └── UnknownActionError
"""

from typing import Any


class EmulatorError(Exception):
    """Base exception for all emulator errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(EmulatorError):
    """Base exception for chat session errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details, recoverable)
        self.document_id = document_id


class SessionNotFoundError(SessionError):
    """Raised when no chat session is registered for a document."""

    def __init__(self, document_id: str) -> None:
        super().__init__(
            message=f"Chat session not found: {document_id}",
            document_id=document_id,
            recoverable=False,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(EmulatorError):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=False,
        )


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(EmulatorError):
    """Base exception for conversation transport errors."""

    pass


class ConversationRequestError(TransportError):
    """Raised when the emulator server answers a conversation call with a failure.

    The string form is the bare message, e.g.
    ``Error occurred while starting a new conversation: 500: INTERNAL SERVER ERROR``.
    """

    def __init__(self, operation: str, status: int, status_text: str) -> None:
        super().__init__(
            message=f"Error occurred while {operation}: {status}: {status_text}",
            details={
                "operation": operation,
                "status": status,
                "status_text": status_text,
            },
            recoverable=False,
        )
        self.operation = operation
        self.status = status
        self.status_text = status_text

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Speech Errors
# =============================================================================


class SpeechError(EmulatorError):
    """Base exception for speech services errors."""

    pass


class SpeechTokenError(SpeechError):
    """Raised when a speech authorization token cannot be retrieved."""

    def __init__(self, endpoint_id: str | None, reason: str) -> None:
        details: dict[str, Any] = {"reason": reason}
        if endpoint_id:
            details["endpoint_id"] = endpoint_id
        super().__init__(
            message=f"Speech token retrieval failed: {reason}",
            details=details,
            recoverable=True,  # A later restart fetches a new token
        )


# =============================================================================
# Action Errors
# =============================================================================


class ActionError(EmulatorError):
    """Base exception for chat action dispatch errors."""

    pass


class UnknownActionError(ActionError):
    """Raised when an action has no registered handler."""

    def __init__(self, action: Any) -> None:
        super().__init__(
            message=f"No handler registered for action: {action}",
            details={"action": str(action)},
            recoverable=False,
        )
