"""Wiring of the session, gateway and view stores for one console."""

from collections.abc import Callable
from typing import Any

import httpx

from .infrastructure.api_gateway import ApiGateway
from .infrastructure.config import ConsoleConfig
from .infrastructure.session import SessionContext
from .presentation.alert_board import AlertTriageBoard
from .presentation.auth import AuthService
from .presentation.rule_registry import RuleRegistry
from .presentation.traffic_view import TrafficAnalyticsView


class Console:
    """One operator's console: a session, a gateway and the three views.

    The views share nothing but the gateway; each owns its own store.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        token: str | None = None,
        on_unauthenticated: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.session = SessionContext(token=token, on_unauthenticated=on_unauthenticated)
        self.gateway = ApiGateway(config.api, self.session, transport=transport)
        self.auth = AuthService(self.gateway, self.session)
        self.rules = RuleRegistry(self.gateway)
        self.alerts = AlertTriageBoard(
            self.gateway, show_resolved=config.views.show_resolved
        )
        self.traffic = TrafficAnalyticsView(
            self.gateway, time_range=config.views.time_range
        )

    async def __aenter__(self) -> "Console":
        await self.gateway.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.gateway.close()
