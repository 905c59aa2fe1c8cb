"""Domain models and value objects for filterdesk.

This module contains the rule, alert and traffic models exchanged with the
backend, the client-side draft types, and the error taxonomy shared by every
store.
"""

from .models import (
    Alert,
    AuthExpired,
    ClientValidationError,
    ErrorCode,
    FilterDeskError,
    Outcome,
    Rule,
    RuleDraft,
    RuleEditSession,
    ServerRejection,
    Severity,
    SourceCount,
    StaleResponse,
    TestOutcome,
    TimeRange,
    TrafficSnapshot,
    TransportError,
    TrendPoint,
    UserIdentity,
)
from .sequencing import RequestSequencer

__all__ = [
    "Alert",
    "AuthExpired",
    "ClientValidationError",
    "ErrorCode",
    "FilterDeskError",
    "Outcome",
    "RequestSequencer",
    "Rule",
    "RuleDraft",
    "RuleEditSession",
    "ServerRejection",
    "Severity",
    "SourceCount",
    "StaleResponse",
    "TestOutcome",
    "TimeRange",
    "TrafficSnapshot",
    "TransportError",
    "TrendPoint",
    "UserIdentity",
]
