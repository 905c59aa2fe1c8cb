"""Explicit session context handed to the API gateway."""

from collections.abc import Callable

import structlog

from ..domain.models import UserIdentity

logger = structlog.get_logger(__name__)


class SessionContext:
    """Holds the bearer credential and identity for one console session.

    The gateway reads the token on every authenticated call and reports a
    401 through :meth:`on_unauthenticated`, which drops the credential and
    notifies whoever owns navigation back to the login screen.
    """

    def __init__(
        self,
        token: str | None = None,
        identity: UserIdentity | None = None,
        on_unauthenticated: Callable[[], None] | None = None,
    ) -> None:
        self._token = token
        self._identity = identity
        self._callback = on_unauthenticated

    def get_token(self) -> str | None:
        return self._token

    @property
    def identity(self) -> UserIdentity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def sign_in(self, token: str, identity: UserIdentity | None = None) -> None:
        self._token = token
        self._identity = identity
        logger.info(
            "Session established",
            username=identity.username if identity else None,
        )

    def sign_out(self) -> None:
        self._token = None
        self._identity = None

    def on_unauthenticated(self) -> None:
        """Invalidate the session after the server refused the credential."""
        logger.warning(
            "Session invalidated by server",
            username=self._identity.username if self._identity else None,
        )
        self.sign_out()
        if self._callback is not None:
            self._callback()
