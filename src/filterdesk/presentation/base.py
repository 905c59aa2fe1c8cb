"""Shared plumbing for the view stores."""

from typing import Any, TypeVar

import structlog

from ..domain.models import ErrorCode, Outcome
from ..infrastructure.error_handler import ErrorHandler

T = TypeVar("T")


class ViewStore:
    """Base for stores that render a single latest-error string.

    ``last_error`` is set by every failed operation and cleared by the next
    successful one. Superseded fetches touch neither.
    """

    component = "view"

    def __init__(self) -> None:
        self.last_error: str | None = None
        self.error_handler = ErrorHandler(self.component)
        self.logger = structlog.get_logger(__name__).bind(component=self.component)

    def _succeed(self, value: T | None = None) -> Outcome[T]:
        self.last_error = None
        return Outcome.success(value)

    def _fail(
        self, error: Exception, operation: str, fallback: str, **context: Any
    ) -> Outcome[Any]:
        outcome = self.error_handler.handle_error(error, operation, fallback, **context)
        if outcome.error is not None and outcome.error.code != ErrorCode.STALE_RESPONSE:
            self.last_error = outcome.error.user_message
        return outcome
