"""Tests for Exception Hierarchy.

Tests cover:
- EmulatorError base class
- Session exceptions
- Configuration exceptions
- Transport exceptions
- Speech exceptions
- Action exceptions
"""

import pytest

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


class TestEmulatorError:
    """Tests for EmulatorError base class."""

    def test_basic_creation(self):
        """Create basic error with message."""
        error = EmulatorError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}
        assert error.recoverable is False

    def test_with_details(self):
        """Details are appended to the string form."""
        error = EmulatorError("Operation failed", details={"operation": "test"})
        assert error.details == {"operation": "test"}
        assert "operation" in str(error)

    def test_to_dict(self):
        """Convert error to dictionary."""
        error = EmulatorError("Test error", details={"key": "value"}, recoverable=True)
        result = error.to_dict()

        assert result == {
            "type": "EmulatorError",
            "message": "Test error",
            "details": {"key": "value"},
            "recoverable": True,
        }


class TestSessionErrors:
    """Tests for session exceptions."""

    def test_session_error_document_id(self):
        """Document id is carried in details."""
        error = SessionError("broken", document_id="doc")
        assert error.document_id == "doc"
        assert error.details["document_id"] == "doc"
        assert isinstance(error, EmulatorError)

    def test_session_not_found(self):
        """SessionNotFoundError names the document."""
        error = SessionNotFoundError("doc")
        assert "doc" in error.message
        assert isinstance(error, SessionError)
        assert error.recoverable is False


class TestConfigurationErrors:
    """Tests for configuration exceptions."""

    def test_invalid_config(self):
        """InvalidConfigError records key, value and reason."""
        error = InvalidConfigError("server_url", "ftp://x", "bad scheme")
        assert isinstance(error, ConfigurationError)
        assert error.details["config_key"] == "server_url"
        assert error.details["value"] == "ftp://x"
        assert "bad scheme" in error.message


class TestTransportErrors:
    """Tests for transport exceptions."""

    def test_conversation_request_message(self):
        """String form is the bare failure message."""
        error = ConversationRequestError(
            "starting a new conversation", 500, "INTERNAL SERVER ERROR"
        )
        assert str(error) == (
            "Error occurred while starting a new conversation: 500: INTERNAL SERVER ERROR"
        )
        assert error.status == 500
        assert error.status_text == "INTERNAL SERVER ERROR"
        assert error.operation == "starting a new conversation"

    def test_conversation_request_hierarchy(self):
        """ConversationRequestError is a TransportError."""
        error = ConversationRequestError("updating a conversation", 404, "Not Found")
        assert isinstance(error, TransportError)
        assert error.to_dict()["details"]["status"] == 404

    def test_catchable_as_base(self):
        """Transport failures can be caught as EmulatorError."""
        with pytest.raises(EmulatorError):
            raise ConversationRequestError("feeding activities as a transcript", 400, "Bad Request")


class TestSpeechErrors:
    """Tests for speech exceptions."""

    def test_speech_token_error(self):
        """Token errors are recoverable and carry the endpoint."""
        error = SpeechTokenError("endpoint1", "no token")
        assert isinstance(error, SpeechError)
        assert error.recoverable is True
        assert error.details["endpoint_id"] == "endpoint1"

    def test_speech_token_error_without_endpoint(self):
        """Endpoint is omitted when unknown."""
        error = SpeechTokenError(None, "no token")
        assert "endpoint_id" not in error.details


class TestActionErrors:
    """Tests for action exceptions."""

    def test_unknown_action(self):
        """UnknownActionError names the action."""
        error = UnknownActionError("CHAT/NOPE")
        assert isinstance(error, ActionError)
        assert "CHAT/NOPE" in error.message
        assert error.details["action"] == "CHAT/NOPE"
