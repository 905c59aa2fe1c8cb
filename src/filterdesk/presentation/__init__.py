"""View stores and chart view-models for the management views."""

from .alert_board import AlertTriageBoard
from .auth import AuthService
from .charts import (
    Distribution,
    Series,
    SummaryMetric,
    TrendSeries,
    derive_source_distribution,
    derive_summary_distribution,
    derive_summary_metrics,
    derive_trend_series,
)
from .rule_registry import RuleRegistry
from .traffic_view import TrafficAnalyticsView

__all__ = [
    "AlertTriageBoard",
    "AuthService",
    "Distribution",
    "RuleRegistry",
    "Series",
    "SummaryMetric",
    "TrafficAnalyticsView",
    "TrendSeries",
    "derive_source_distribution",
    "derive_summary_distribution",
    "derive_summary_metrics",
    "derive_trend_series",
]
