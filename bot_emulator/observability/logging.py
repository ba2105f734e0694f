"""Structured Logging - JSON logs with correlation.

Provides structured logging for:
- Chat session lifecycle (create, restart, close)
- Transcript bootstrap
- Speech factory retrieval
- Transport failures

All session logs include document_id for correlation.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    level = "WARNING" if level.upper() == "WARN" else level.upper()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard logging to use structlog
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_document(document_id: str) -> None:
    """Bind document_id to all logs in current context."""
    structlog.contextvars.bind_contextvars(document_id=document_id)


def unbind_document() -> None:
    """Remove document_id from log context."""
    structlog.contextvars.unbind_contextvars("document_id")


class ChatSessionLogger:
    """Logger for chat session events."""

    def __init__(self, document_id: str) -> None:
        self._document_id = document_id
        self._log = get_logger("chat").bind(document_id=document_id)

    def session_created(self, conversation_id: str, mode: str, metadata: dict[str, Any] | None = None) -> None:
        """Log session creation."""
        self._log.info(
            "session_created",
            event_type="chat.created",
            conversation_id=conversation_id,
            mode=mode,
            **(metadata or {}),
        )

    def session_restarted(
        self,
        old_conversation_id: str,
        conversation_id: str,
        new_user: bool,
    ) -> None:
        """Log successful restart."""
        self._log.info(
            "session_restarted",
            event_type="chat.restarted",
            old_conversation_id=old_conversation_id,
            conversation_id=conversation_id,
            new_user=new_user,
        )

    def session_closed(self, conversation_id: str | None) -> None:
        """Log session close."""
        self._log.info(
            "session_closed",
            event_type="chat.closed",
            conversation_id=conversation_id,
        )

    def transcript_opened(self, file_name: str, activity_count: int) -> None:
        """Log transcript bootstrap."""
        self._log.info(
            "transcript_opened",
            event_type="chat.transcript_opened",
            file_name=file_name,
            activity_count=activity_count,
        )

    def request_failed(self, operation: str, status: int, status_text: str) -> None:
        """Log a non-successful conversation server response."""
        self._log.error(
            "request_failed",
            event_type="transport.request_failed",
            operation=operation,
            status=status,
            status_text=status_text,
        )

    def speech_factory_updated(self, generation: int, replaced: bool) -> None:
        """Log speech factory write-back."""
        self._log.debug(
            "speech_factory_updated",
            event_type="speech.factory_updated",
            generation=generation,
            replaced=replaced,
        )

    def speech_factory_discarded(self, generation: int, current_generation: int) -> None:
        """Log a stale speech factory result being dropped."""
        self._log.info(
            "speech_factory_discarded",
            event_type="speech.factory_discarded",
            generation=generation,
            current_generation=current_generation,
        )

    def speech_factory_failed(self, generation: int, error: str) -> None:
        """Log speech pipeline failure."""
        self._log.warning(
            "speech_factory_failed",
            event_type="speech.factory_failed",
            generation=generation,
            error=error,
        )


def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
