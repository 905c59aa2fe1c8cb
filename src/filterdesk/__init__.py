"""filterdesk - administrative console for a white-traffic filtering appliance.

This package provides the client-side state layer of the console: view stores
for filter rules, alert triage and traffic analytics that keep local state in
sync with the appliance's REST API.
"""

__version__ = "0.1.0"

from .domain.models import (
    Alert,
    ErrorCode,
    FilterDeskError,
    Outcome,
    Rule,
    RuleDraft,
    RuleEditSession,
    TimeRange,
    TrafficSnapshot,
)

__all__ = [
    "__version__",
    "Alert",
    "ErrorCode",
    "FilterDeskError",
    "Outcome",
    "Rule",
    "RuleDraft",
    "RuleEditSession",
    "TimeRange",
    "TrafficSnapshot",
]
