"""Error handling for store operations."""

from typing import Any

import structlog

from ..domain.models import (
    ErrorCode,
    FilterDeskError,
    Outcome,
    ServerRejection,
)


class ErrorHandler:
    """Centralized error handling with structured logging.

    Converts whatever an operation raised into a failure :class:`Outcome`
    whose ``user_message`` is the text the view should render.
    """

    def __init__(self, component: str) -> None:
        self.component = component
        self.logger = structlog.get_logger(__name__).bind(component=component)

    def handle_error(
        self, error: Exception, operation: str, fallback: str, **context: Any
    ) -> Outcome[Any]:
        """Convert an exception into a failure outcome.

        Args:
            error: The exception raised by the operation
            operation: Operation name for logging
            fallback: Display text when the error carries no better message
            **context: Extra key-value pairs for the log event

        Returns:
            Failure outcome with a displayable error
        """
        if isinstance(error, ServerRejection):
            return Outcome.failure(
                self._handle_rejection(error, operation, fallback, context)
            )
        if isinstance(error, FilterDeskError):
            return Outcome.failure(self._handle_known(error, operation, context))
        return Outcome.failure(
            self._handle_unexpected(error, operation, fallback, context)
        )

    def _handle_rejection(
        self,
        error: ServerRejection,
        operation: str,
        fallback: str,
        context: dict[str, Any],
    ) -> ServerRejection:
        self.logger.warning(
            "Server rejected operation",
            operation=operation,
            error_code=error.code.value,
            status_code=error.status_code,
            server_message=error.server_message,
            **context,
        )
        if not error.server_message:
            error.user_message = fallback
        return error

    def _handle_known(
        self, error: FilterDeskError, operation: str, context: dict[str, Any]
    ) -> FilterDeskError:
        log = (
            self.logger.debug
            if error.code == ErrorCode.VALIDATION_FAILED
            else self.logger.warning
        )
        log(
            "Operation failed",
            operation=operation,
            error_code=error.code.value,
            error_message=error.message,
            user_message=error.user_message,
            **{**error.context, **context},
        )
        return error

    def _handle_unexpected(
        self,
        error: Exception,
        operation: str,
        fallback: str,
        context: dict[str, Any],
    ) -> FilterDeskError:
        self.logger.error(
            "Unexpected error during operation",
            operation=operation,
            error_type=type(error).__name__,
            error_message=str(error),
            exc_info=True,
            **context,
        )
        return FilterDeskError(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(error),
            user_message=fallback,
            context={"error_type": type(error).__name__},
        )
