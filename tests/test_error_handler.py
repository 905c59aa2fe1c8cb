"""Tests for error handling functionality."""

from filterdesk.domain.models import (
    AuthExpired,
    ClientValidationError,
    ErrorCode,
    FilterDeskError,
    ServerRejection,
    TransportError,
)
from filterdesk.infrastructure.error_handler import ErrorHandler

FALLBACK = "Operation failed, please retry"


class TestErrorHandler:
    """Test cases for ErrorHandler."""

    def setup_method(self):
        self.handler = ErrorHandler("test")

    def test_server_message_preferred(self):
        outcome = self.handler.handle_error(
            ServerRejection(400, "name already exists"), "create", FALLBACK
        )

        assert not outcome.ok
        assert outcome.message == "name already exists"

    def test_rejection_without_message_uses_fallback(self):
        outcome = self.handler.handle_error(ServerRejection(500), "create", FALLBACK)

        assert outcome.message == FALLBACK
        assert outcome.error.code == ErrorCode.SERVER_REJECTED

    def test_known_errors_keep_their_message(self):
        for error in (
            ClientValidationError("Rule name and conditions are required"),
            TransportError("refused"),
            AuthExpired(),
        ):
            outcome = self.handler.handle_error(error, "op", FALLBACK)

            assert outcome.error is error
            assert outcome.message == error.user_message

    def test_unexpected_error_becomes_internal(self):
        outcome = self.handler.handle_error(KeyError("id"), "load", FALLBACK, rule_id=3)

        assert isinstance(outcome.error, FilterDeskError)
        assert outcome.error.code == ErrorCode.INTERNAL_ERROR
        assert outcome.message == FALLBACK
        assert outcome.error.context["error_type"] == "KeyError"
