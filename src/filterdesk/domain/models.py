"""Domain models for the filterdesk console."""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

RuleId = int | str
AlertId = int | str

T = TypeVar("T")


class Severity(str, Enum):
    """Alert severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimeRange(str, Enum):
    """Time windows supported by the traffic analysis endpoint."""

    LAST_HOUR = "1h"
    LAST_DAY = "24h"
    LAST_WEEK = "7d"
    LAST_MONTH = "30d"


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    VALIDATION_FAILED = "VALIDATION_001"
    TRANSPORT_FAILED = "TRANSPORT_001"
    SERVER_REJECTED = "SERVER_001"
    INVALID_RESPONSE = "SERVER_002"
    AUTH_EXPIRED = "AUTH_001"
    NOT_FOUND = "STATE_001"
    STALE_RESPONSE = "STATE_002"
    INTERNAL_ERROR = "INTERNAL_001"


class FilterDeskError(Exception):
    """Base exception with user-friendly messages."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        context: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.user_message = user_message
        self.context = context or {}
        super().__init__(message)


class ClientValidationError(FilterDeskError):
    """Input rejected on the client before any network call."""

    def __init__(self, user_message: str, context: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.VALIDATION_FAILED,
            f"Validation failed: {user_message}",
            user_message,
            context,
        )


class TransportError(FilterDeskError):
    """Network unreachable or request timed out."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.TRANSPORT_FAILED,
            message,
            "Unable to reach the server, please check the connection and retry",
            context,
        )


class ServerRejection(FilterDeskError):
    """Non-2xx response from the backend."""

    def __init__(
        self,
        status_code: int,
        server_message: str | None = None,
        code: ErrorCode = ErrorCode.SERVER_REJECTED,
        context: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(
            code,
            f"Server rejected request with status {status_code}",
            server_message or "The server rejected the request",
            context,
        )


class AuthExpired(FilterDeskError):
    """Credential missing, expired or revoked (401)."""

    def __init__(self, context: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.AUTH_EXPIRED,
            "Authentication expired",
            "Your session has expired, please sign in again",
            context,
        )


class StaleResponse(FilterDeskError):
    """A response that arrived after a newer request superseded it."""

    def __init__(self, context: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.STALE_RESPONSE,
            "Response superseded by a newer request",
            "",
            context,
        )


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success or failure of a store operation.

    Store operations never raise across the view boundary; they hand back an
    Outcome holding either the produced value or the error that stopped it.
    """

    value: T | None = None
    error: FilterDeskError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FilterDeskError) -> "Outcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        """Display text for a failed outcome."""
        return self.error.user_message if self.error is not None else None


class Rule(BaseModel):
    """A named filter expression marking matching traffic as white."""

    id: RuleId | None = None
    name: str
    description: str = ""
    conditions: str = ""
    active: bool = True

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("conditions", mode="before")
    @classmethod
    def serialize_conditions(cls, v: Any) -> Any:
        """Keep conditions as serialized text even if the server expands them."""
        if v is None:
            return ""
        if isinstance(v, dict | list):
            return json.dumps(v, separators=(",", ":"), ensure_ascii=False)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return "" if v is None else v


RULE_DRAFT_FIELDS = frozenset({"name", "description", "conditions", "active"})


class RuleDraft(BaseModel):
    """Working copy of a rule being created or edited.

    ``target_id`` is ``None`` for a new rule and the identifier of the rule
    being edited otherwise.
    """

    target_id: RuleId | None = None
    name: str = ""
    description: str = ""
    conditions: str = ""
    active: bool = True

    model_config = ConfigDict(validate_assignment=True)

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleDraft":
        return cls(
            target_id=rule.id,
            name=rule.name,
            description=rule.description,
            conditions=rule.conditions,
            active=rule.active,
        )

    @property
    def is_new(self) -> bool:
        return self.target_id is None

    def validate_required(self) -> None:
        """Reject drafts the backend would never accept.

        Raises:
            ClientValidationError: If name or conditions are blank
        """
        missing = [
            field for field in ("name", "conditions") if not getattr(self, field).strip()
        ]
        if missing:
            raise ClientValidationError(
                "Rule name and conditions are required",
                context={"missing_fields": missing},
            )

    def to_payload(self) -> dict[str, Any]:
        """Request body for create (no id) or update (whole record with id)."""
        payload = self.model_dump(exclude={"target_id"})
        if not self.is_new:
            payload = {"id": self.target_id, **payload}
        return payload


class RuleEditSession(BaseModel):
    """The single in-progress edit of an existing rule."""

    target_rule_id: RuleId
    draft: RuleDraft


class TestOutcome(BaseModel):
    """Message returned by a rule test invocation."""

    __test__ = False

    rule_id: RuleId
    message: str


class Alert(BaseModel):
    """A backend-raised notice about suspicious or noteworthy traffic."""

    id: AlertId
    title: str
    description: str = ""
    severity: Severity = Severity.LOW
    timestamp: datetime
    resolved: bool = False
    details: Any | None = None
    suggestion: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class TrendPoint(BaseModel):
    """Traffic counters for one bucket of the trend timeline."""

    time: str
    total: int = Field(default=0, ge=0)
    white: int = Field(default=0, ge=0)
    filtered: int = Field(default=0, ge=0)
    malicious: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("time", mode="before")
    @classmethod
    def stringify_time(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.isoformat()
        if isinstance(v, int | float):
            return str(v)
        return v


class SourceCount(BaseModel):
    """Request count attributed to one traffic source."""

    source: str
    count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class TrafficSnapshot(BaseModel):
    """Point-in-time read of aggregate and time-series traffic counters.

    The headline counters are taken as supplied by the backend and are not
    recomputed from ``trends``.
    """

    total: int = Field(default=0, ge=0)
    white: int = Field(default=0, ge=0)
    filtered: int = Field(default=0, ge=0)
    malicious: int = Field(default=0, ge=0)
    trends: list[TrendPoint] = Field(default_factory=list)
    sources: list[SourceCount] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def empty(cls) -> "TrafficSnapshot":
        return cls()


class UserIdentity(BaseModel):
    """Identity returned by the login endpoint."""

    username: str
    token: str | None = None

    model_config = ConfigDict(extra="allow")
