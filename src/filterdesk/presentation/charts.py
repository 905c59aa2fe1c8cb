"""Chart view-models derived from a traffic snapshot.

Pure projections: nothing here touches the network or mutates the snapshot.
"""

from pydantic import BaseModel, ConfigDict

from ..domain.models import TrafficSnapshot

TOTAL_COLOR = "#333333"
WHITE_COLOR = "#4CAF50"
FILTERED_COLOR = "#FF9800"
MALICIOUS_COLOR = "#F44336"

SOURCE_PALETTE = (
    "#4CAF50",
    "#2196F3",
    "#FF9800",
    "#F44336",
    "#9C27B0",
    "#00BCD4",
    "#795548",
    "#607D8B",
)


class Series(BaseModel):
    """One line of the time-series chart."""

    key: str
    label: str
    color: str
    data: tuple[int, ...]

    model_config = ConfigDict(frozen=True)


class TrendSeries(BaseModel):
    """Four series aligned on the snapshot's trend timeline."""

    labels: tuple[str, ...]
    total: Series
    white: Series
    filtered: Series
    malicious: Series

    model_config = ConfigDict(frozen=True)

    @property
    def series(self) -> tuple[Series, ...]:
        return (self.total, self.white, self.filtered, self.malicious)


class Distribution(BaseModel):
    """Labels, values and colours for a proportional (pie) chart."""

    labels: tuple[str, ...]
    values: tuple[int, ...]
    colors: tuple[str, ...]

    model_config = ConfigDict(frozen=True)

    @property
    def total(self) -> int:
        return sum(self.values)

    def shares(self) -> tuple[float, ...]:
        """Fraction of the whole per slice; all zeros for an empty chart."""
        total = self.total
        if total == 0:
            return tuple(0.0 for _ in self.values)
        return tuple(value / total for value in self.values)


class SummaryMetric(BaseModel):
    """One headline stat card."""

    key: str
    title: str
    value: int
    description: str
    color: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def formatted(self) -> str:
        return f"{self.value:,}"


def derive_trend_series(snapshot: TrafficSnapshot) -> TrendSeries:
    trends = snapshot.trends

    def series(key: str, label: str, color: str) -> Series:
        return Series(
            key=key,
            label=label,
            color=color,
            data=tuple(getattr(point, key) for point in trends),
        )

    return TrendSeries(
        labels=tuple(point.time for point in trends),
        total=series("total", "Total traffic", TOTAL_COLOR),
        white=series("white", "White traffic", WHITE_COLOR),
        filtered=series("filtered", "Filtered traffic", FILTERED_COLOR),
        malicious=series("malicious", "Malicious traffic", MALICIOUS_COLOR),
    )


def derive_source_distribution(snapshot: TrafficSnapshot) -> Distribution:
    """Traffic per source, coloured from a repeating palette."""
    sources = snapshot.sources
    return Distribution(
        labels=tuple(item.source for item in sources),
        values=tuple(item.count for item in sources),
        colors=tuple(
            SOURCE_PALETTE[i % len(SOURCE_PALETTE)] for i in range(len(sources))
        ),
    )


def derive_summary_distribution(snapshot: TrafficSnapshot) -> Distribution:
    """White / filtered / malicious headline counters as pie slices."""
    return Distribution(
        labels=("White traffic", "Filtered traffic", "Malicious traffic"),
        values=(snapshot.white, snapshot.filtered, snapshot.malicious),
        colors=(WHITE_COLOR, FILTERED_COLOR, MALICIOUS_COLOR),
    )


def derive_summary_metrics(snapshot: TrafficSnapshot) -> tuple[SummaryMetric, ...]:
    return (
        SummaryMetric(
            key="total",
            title="Total traffic",
            value=snapshot.total,
            description="Total requests",
        ),
        SummaryMetric(
            key="white",
            title="White traffic",
            value=snapshot.white,
            description="Recognised legitimate traffic",
            color=WHITE_COLOR,
        ),
        SummaryMetric(
            key="filtered",
            title="Filtered traffic",
            value=snapshot.filtered,
            description="Suspicious traffic filtered out",
            color=FILTERED_COLOR,
        ),
        SummaryMetric(
            key="malicious",
            title="Malicious traffic",
            value=snapshot.malicious,
            description="Confirmed threat traffic",
            color=MALICIOUS_COLOR,
        ),
    )
