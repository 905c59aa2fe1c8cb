"""Traffic analytics store.

Holds the selected time range and the last snapshot fetched for it. Each
fetch is tagged with a request token so that only the response for the most
recent selection is ever displayed, whatever order responses arrive in.
"""

from ..domain.models import (
    ClientValidationError,
    Outcome,
    StaleResponse,
    TimeRange,
    TrafficSnapshot,
)
from ..domain.sequencing import RequestSequencer
from ..infrastructure.api_gateway import ApiGateway
from .base import ViewStore
from .charts import (
    Distribution,
    SummaryMetric,
    TrendSeries,
    derive_source_distribution,
    derive_summary_distribution,
    derive_summary_metrics,
    derive_trend_series,
)

FETCH_FAILED = "Failed to load traffic analysis, please retry"


class TrafficAnalyticsView(ViewStore):
    """Traffic analysis view store."""

    component = "traffic_view"

    def __init__(
        self, gateway: ApiGateway, time_range: TimeRange = TimeRange.LAST_DAY
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.range = TimeRange(time_range)
        self.snapshot: TrafficSnapshot | None = None
        self.snapshot_range: TimeRange | None = None
        self.loading = False
        self._sequencer = RequestSequencer()

    @property
    def displayed_snapshot(self) -> TrafficSnapshot:
        return self.snapshot if self.snapshot is not None else TrafficSnapshot.empty()

    async def load(self) -> Outcome[TrafficSnapshot]:
        return await self._fetch(self.range)

    async def refresh(self) -> Outcome[TrafficSnapshot]:
        """Re-fetch the currently selected range."""
        return await self._fetch(self.range)

    async def set_range(self, time_range: TimeRange | str) -> Outcome[TrafficSnapshot]:
        """Select a time range and fetch its snapshot."""
        try:
            selected = TimeRange(time_range)
        except ValueError:
            return self._fail(
                ClientValidationError(
                    f"Unsupported time range '{time_range}'",
                    context={"allowed": [r.value for r in TimeRange]},
                ),
                "set_range",
                FETCH_FAILED,
            )
        self.range = selected
        return await self._fetch(selected)

    async def _fetch(self, time_range: TimeRange) -> Outcome[TrafficSnapshot]:
        token = self._sequencer.issue()
        self.loading = True
        try:
            snapshot = await self.gateway.traffic.analysis(time_range)
        except Exception as e:
            if not self._sequencer.is_current(token):
                return Outcome.failure(StaleResponse(context={"token": token}))
            self.loading = False
            return self._fail(e, "fetch", FETCH_FAILED, range=time_range.value)

        if not self._sequencer.is_current(token):
            self.logger.debug(
                "Discarding superseded traffic snapshot",
                range=time_range.value,
                token=token,
                latest=self._sequencer.latest,
            )
            return Outcome.failure(StaleResponse(context={"token": token}))

        self.loading = False
        self.snapshot = snapshot
        self.snapshot_range = time_range
        return self._succeed(snapshot)

    def trend_series(self) -> TrendSeries:
        return derive_trend_series(self.displayed_snapshot)

    def source_distribution(self) -> Distribution:
        return derive_source_distribution(self.displayed_snapshot)

    def summary_distribution(self) -> Distribution:
        return derive_summary_distribution(self.displayed_snapshot)

    def summary_metrics(self) -> tuple[SummaryMetric, ...]:
        return derive_summary_metrics(self.displayed_snapshot)
