"""Login and registration form handling."""

from ..domain.models import (
    ClientValidationError,
    ErrorCode,
    Outcome,
    ServerRejection,
    UserIdentity,
)
from ..infrastructure.api_gateway import ApiGateway
from ..infrastructure.session import SessionContext
from .base import ViewStore

LOGIN_FAILED = "Login failed, please retry"
REGISTER_FAILED = "Registration failed, please retry"


class AuthService(ViewStore):
    """Validates credentials locally and signs the session in."""

    component = "auth"

    def __init__(self, gateway: ApiGateway, session: SessionContext) -> None:
        super().__init__()
        self.gateway = gateway
        self.session = session

    @staticmethod
    def _validate(
        username: str, password: str, confirm_password: str | None = None
    ) -> None:
        if not username.strip() or not password:
            raise ClientValidationError("Username and password are required")
        if confirm_password is not None and password != confirm_password:
            raise ClientValidationError("Passwords do not match")

    async def login(self, username: str, password: str) -> Outcome[UserIdentity]:
        try:
            self._validate(username, password)
            identity = await self.gateway.auth.login(username, password)
        except Exception as e:
            return self._fail(e, "login", LOGIN_FAILED, username=username)
        return self._sign_in(identity)

    async def register(
        self, username: str, password: str, confirm_password: str
    ) -> Outcome[UserIdentity]:
        """Create an account; the backend signs the new user in directly."""
        try:
            self._validate(username, password, confirm_password)
            identity = await self.gateway.auth.register(username, password)
        except Exception as e:
            return self._fail(e, "register", REGISTER_FAILED, username=username)
        return self._sign_in(identity)

    def _sign_in(self, identity: UserIdentity) -> Outcome[UserIdentity]:
        if not identity.token:
            return self._fail(
                ServerRejection(
                    200,
                    "The server did not issue a session token",
                    code=ErrorCode.INVALID_RESPONSE,
                ),
                "sign_in",
                LOGIN_FAILED,
            )
        self.session.sign_in(identity.token, identity)
        return self._succeed(identity)

    def logout(self) -> None:
        self.session.sign_out()
