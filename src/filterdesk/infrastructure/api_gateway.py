"""HTTP gateway to the filtering appliance's REST API.

This module wraps every call the console makes to the backend: login and
registration, rule management, alert triage and traffic analysis. Each
resource group is a thin object sharing one ``httpx.AsyncClient`` and one
error mapping, so that stores only ever see the filterdesk error taxonomy.
"""

import time
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ..domain.models import (
    Alert,
    AlertId,
    AuthExpired,
    ErrorCode,
    Rule,
    RuleId,
    ServerRejection,
    TimeRange,
    TrafficSnapshot,
    TransportError,
    UserIdentity,
)
from .config import ApiConfig
from .session import SessionContext

logger = structlog.get_logger(__name__)


class ApiGateway:
    """Async client for the backend REST API.

    Authenticated calls carry ``Authorization: Bearer <token>`` taken from the
    session at request time. A 401 invalidates the session and raises
    :class:`AuthExpired`; nothing is retried here.
    """

    def __init__(
        self,
        config: ApiConfig,
        session: SessionContext,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: API connection settings
            session: Session supplying the bearer credential
            transport: Optional transport override (used by tests)
        """
        self.config = config
        self.session = session
        self.base_url = config.base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = logger.bind(base_url=self.base_url)

        self.auth = AuthResource(self)
        self.rules = RulesResource(self)
        self.alerts = AlertsResource(self)
        self.traffic = TrafficResource(self)

    def _timeout(self) -> httpx.Timeout:
        if self.config.request_timeout_ms is None:
            return httpx.Timeout(5.0)
        return httpx.Timeout(self.config.request_timeout_ms / 1000)

    async def __aenter__(self) -> "ApiGateway":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": self.config.user_agent,
                },
                timeout=self._timeout(),
                verify=self.config.verify_ssl,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Make a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. ``/api/rules``
            json: Request body
            params: URL query parameters
            authenticated: Whether to send the bearer credential

        Returns:
            Decoded JSON body, or ``None`` for an empty body

        Raises:
            TransportError: Network failure or timeout
            AuthExpired: Server answered 401
            ServerRejection: Any other non-2xx status, or an undecodable body
        """
        client = self._ensure_client()

        headers: dict[str, str] = {}
        if authenticated:
            token = self.session.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        request_logger = self._logger.bind(method=method, path=path)
        request_logger.debug("Making request")
        start_time = time.perf_counter()

        try:
            response = await client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as e:
            request_logger.warning("Request timeout", error=str(e))
            raise TransportError(
                f"Request to {path} timed out", context={"path": path}
            ) from e
        except httpx.TransportError as e:
            request_logger.warning("Connection error", error=str(e))
            raise TransportError(
                f"Failed to reach {path}: {e}", context={"path": path}
            ) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        request_logger.debug(
            "Request completed",
            status_code=response.status_code,
            elapsed_ms=round(elapsed_ms, 2),
        )

        # login and register answer 401 for bad credentials, not an expired session
        if response.status_code == 401 and authenticated:
            self.session.on_unauthenticated()
            raise AuthExpired(context={"path": path})

        if response.status_code >= 400:
            raise ServerRejection(
                response.status_code,
                _extract_message(response),
                context={"path": path, "method": method},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ServerRejection(
                response.status_code,
                code=ErrorCode.INVALID_RESPONSE,
                context={"path": path, "reason": "body is not JSON"},
            ) from e


def _extract_message(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


def _envelope_data(body: Any, path: str) -> Any:
    if not isinstance(body, dict) or "data" not in body:
        raise ServerRejection(
            200,
            code=ErrorCode.INVALID_RESPONSE,
            context={"path": path, "reason": "missing data envelope"},
        )
    return body["data"]


def _parse(model: Any, payload: Any, path: str) -> Any:
    try:
        if isinstance(model, list):
            (item_model,) = model
            if not isinstance(payload, list):
                raise TypeError("expected a list")
            return [item_model.model_validate(item) for item in payload]
        return model.model_validate(payload)
    except (ValidationError, TypeError) as e:
        raise ServerRejection(
            200,
            code=ErrorCode.INVALID_RESPONSE,
            context={"path": path, "reason": str(e)},
        ) from e


class _Resource:
    def __init__(self, gateway: ApiGateway) -> None:
        self.gateway = gateway


class AuthResource(_Resource):
    """Login and registration; the only unauthenticated calls."""

    async def _submit(self, path: str, username: str, password: str) -> UserIdentity:
        body = await self.gateway.request(
            "POST",
            path,
            json={"username": username, "password": password},
            authenticated=False,
        )
        if not isinstance(body, dict):
            raise ServerRejection(
                200, code=ErrorCode.INVALID_RESPONSE, context={"path": path}
            )
        if not body.get("success"):
            raise ServerRejection(200, body.get("message") or None, context={"path": path})
        data = body.get("data") or {}
        if isinstance(data, dict):
            data = {"username": username, **data}
        identity: UserIdentity = _parse(UserIdentity, data, path)
        return identity

    async def login(self, username: str, password: str) -> UserIdentity:
        return await self._submit("/api/login", username, password)

    async def register(self, username: str, password: str) -> UserIdentity:
        return await self._submit("/api/register", username, password)


class RulesResource(_Resource):
    """White-traffic filter rules."""

    async def list(self) -> list[Rule]:
        path = "/api/rules"
        body = await self.gateway.request("GET", path)
        rules: list[Rule] = _parse([Rule], _envelope_data(body, path), path)
        return rules

    async def create(self, payload: dict[str, Any]) -> Rule:
        path = "/api/rules"
        body = await self.gateway.request("POST", path, json=payload)
        rule: Rule = _parse(Rule, _envelope_data(body, path), path)
        return rule

    async def update(self, rule_id: RuleId, payload: dict[str, Any]) -> Rule:
        path = f"/api/rules/{rule_id}"
        body = await self.gateway.request("PUT", path, json=payload)
        rule: Rule = _parse(Rule, _envelope_data(body, path), path)
        return rule

    async def delete(self, rule_id: RuleId) -> None:
        await self.gateway.request("DELETE", f"/api/rules/{rule_id}")

    async def test(self, rule_id: RuleId) -> str:
        path = f"/api/rules/test/{rule_id}"
        body = await self.gateway.request("POST", path, json={})
        if not isinstance(body, dict) or not isinstance(body.get("message"), str):
            raise ServerRejection(
                200, code=ErrorCode.INVALID_RESPONSE, context={"path": path}
            )
        return str(body["message"])


class AlertsResource(_Resource):
    """Backend-raised alerts."""

    async def list(self, show_resolved: bool) -> list[Alert]:
        path = "/api/alerts"
        body = await self.gateway.request(
            "GET", path, params={"showResolved": "true" if show_resolved else "false"}
        )
        alerts: list[Alert] = _parse([Alert], _envelope_data(body, path), path)
        return alerts

    async def resolve(self, alert_id: AlertId) -> None:
        await self.gateway.request("PUT", f"/api/alerts/{alert_id}/resolve", json={})

    async def dismiss(self, alert_id: AlertId) -> None:
        await self.gateway.request("PUT", f"/api/alerts/{alert_id}/dismiss", json={})


class TrafficResource(_Resource):
    """Traffic volume analysis."""

    async def analysis(self, time_range: TimeRange) -> TrafficSnapshot:
        path = "/api/traffic/analysis"
        body = await self.gateway.request(
            "GET", path, params={"range": TimeRange(time_range).value}
        )
        snapshot: TrafficSnapshot = _parse(
            TrafficSnapshot, _envelope_data(body, path), path
        )
        return snapshot
