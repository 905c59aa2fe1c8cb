"""Terminal rendering of view-models for the CLI."""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .domain.models import Alert, Rule, Severity
from .presentation.charts import Distribution, SummaryMetric, TrendSeries

SEVERITY_STYLES = {
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}


def to_json(data: Any) -> str:
    """Serialize models (or containers of models) as indented JSON."""

    def encode(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, list | tuple):
            return [encode(item) for item in value]
        if isinstance(value, dict):
            return {str(k): encode(v) for k, v in value.items()}
        return value

    return json.dumps(encode(data), indent=2, default=str, ensure_ascii=False)


class TableFormatter:
    """Rich tables for rules, alerts and traffic summaries."""

    def __init__(self, console: Console | None = None, colors: bool = True):
        self.console = console or Console(color_system="auto" if colors else None)

    def rules(self, rules: Sequence[Rule]) -> None:
        if not rules:
            self.console.print("No rules configured")
            return
        table = Table(title="Rules")
        table.add_column("ID", style="bold")
        table.add_column("Name")
        table.add_column("Description")
        table.add_column("Status")
        for rule in rules:
            status = (
                Text("enabled", style="green")
                if rule.active
                else Text("disabled", style="dim")
            )
            table.add_row(str(rule.id), rule.name, rule.description, status)
        self.console.print(table)

    def alerts(
        self,
        alerts: Sequence[Alert],
        empty_message: str,
        open_counts: Mapping[Severity, int] | None = None,
    ) -> None:
        if not alerts:
            self.console.print(empty_message)
            return
        table = Table(title="Alerts")
        table.add_column("ID", style="bold")
        table.add_column("Severity")
        table.add_column("Title")
        table.add_column("Time")
        table.add_column("Status")
        for alert in alerts:
            table.add_row(
                str(alert.id),
                Text(alert.severity.value, style=SEVERITY_STYLES[alert.severity]),
                alert.title,
                alert.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                "resolved" if alert.resolved else "open",
            )
        self.console.print(table)

        if open_counts is not None:
            summary = Text("Open: ")
            for i, severity in enumerate((Severity.HIGH, Severity.MEDIUM, Severity.LOW)):
                if i:
                    summary.append(", ")
                summary.append(
                    f"{open_counts.get(severity, 0)} {severity.value}",
                    style=SEVERITY_STYLES[severity],
                )
            self.console.print(summary)

    def traffic(
        self,
        metrics: Sequence[SummaryMetric],
        summary: Distribution,
        sources: Distribution,
        trends: TrendSeries,
    ) -> None:
        stats = Table(title="Traffic summary")
        stats.add_column("Metric")
        stats.add_column("Value", justify="right")
        stats.add_column("Description", style="dim")
        for metric in metrics:
            stats.add_row(
                metric.title,
                Text(metric.formatted, style=metric.color or ""),
                metric.description,
            )
        self.console.print(stats)

        self.console.print(self._distribution("Traffic composition", summary))
        if sources.labels:
            self.console.print(self._distribution("Traffic sources", sources))

        if trends.labels:
            trend = Table(title="Trend")
            trend.add_column("Time")
            for series in trends.series:
                trend.add_column(series.label, justify="right")
            for i, label in enumerate(trends.labels):
                trend.add_row(label, *(f"{s.data[i]:,}" for s in trends.series))
            self.console.print(trend)

    @staticmethod
    def _distribution(title: str, distribution: Distribution) -> Table:
        table = Table(title=title)
        table.add_column("Slice")
        table.add_column("Count", justify="right")
        table.add_column("Share", justify="right")
        for label, value, color, share in zip(
            distribution.labels,
            distribution.values,
            distribution.colors,
            distribution.shares(),
            strict=True,
        ):
            table.add_row(Text(label, style=color), f"{value:,}", f"{share:.1%}")
        return table
