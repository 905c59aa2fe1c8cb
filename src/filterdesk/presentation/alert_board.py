"""Alert triage store.

Alerts are listed for one visibility filter at a time. Resolve and dismiss
apply to the local list before the server answers and are rolled back if
the server refuses.
"""

from collections import Counter

from ..domain.models import (
    Alert,
    AlertId,
    Outcome,
    Severity,
    StaleResponse,
)
from ..domain.sequencing import RequestSequencer
from ..infrastructure.api_gateway import ApiGateway
from .base import ViewStore

LOAD_FAILED = "Failed to load alerts, please retry"
RESOLVE_FAILED = "Failed to resolve alert, please retry"
DISMISS_FAILED = "Failed to dismiss alert, please retry"


class AlertTriageBoard(ViewStore):
    """Alerts view store."""

    component = "alert_board"

    def __init__(self, gateway: ApiGateway, show_resolved: bool = False) -> None:
        super().__init__()
        self.gateway = gateway
        self.show_resolved = show_resolved
        self._alerts: list[Alert] = []
        self._sequencer = RequestSequencer()
        # bumped whenever a fetch replaces the list
        self._generation = 0
        self.loading = False

    @property
    def alerts(self) -> tuple[Alert, ...]:
        return tuple(self._alerts)

    @property
    def empty_message(self) -> str:
        return "No resolved alerts" if self.show_resolved else "No active alerts"

    def get(self, alert_id: AlertId) -> Alert | None:
        return next((alert for alert in self._alerts if alert.id == alert_id), None)

    def counts_by_severity(self) -> dict[Severity, int]:
        """Unresolved alerts per severity."""
        counts = Counter(alert.severity for alert in self._alerts if not alert.resolved)
        return {severity: counts.get(severity, 0) for severity in Severity}

    async def list(self, show_resolved: bool) -> Outcome[tuple[Alert, ...]]:
        """Select a visibility filter and fetch alerts for it."""
        self.show_resolved = show_resolved
        return await self.load()

    async def set_show_resolved(self, show_resolved: bool) -> Outcome[tuple[Alert, ...]]:
        return await self.list(show_resolved)

    async def toggle_show_resolved(self) -> Outcome[tuple[Alert, ...]]:
        return await self.list(not self.show_resolved)

    async def load(self) -> Outcome[tuple[Alert, ...]]:
        """Fetch alerts for the current filter, replacing the list.

        A response for a filter that has since been switched is dropped.
        """
        token = self._sequencer.issue()
        show_resolved = self.show_resolved
        self.loading = True
        try:
            alerts = await self.gateway.alerts.list(show_resolved)
        except Exception as e:
            if not self._sequencer.is_current(token):
                return Outcome.failure(StaleResponse(context={"token": token}))
            self.loading = False
            return self._fail(e, "load", LOAD_FAILED, show_resolved=show_resolved)

        if not self._sequencer.is_current(token):
            self.logger.debug(
                "Discarding superseded alert listing",
                token=token,
                latest=self._sequencer.latest,
            )
            return Outcome.failure(StaleResponse(context={"token": token}))

        self.loading = False
        self._alerts = list(alerts)
        self._generation += 1
        return self._succeed(self.alerts)

    async def resolve(self, alert_id: AlertId) -> Outcome[None]:
        """Mark an alert resolved, optimistically.

        Unknown ids are not flipped locally; the server's answer decides.
        """
        generation = self._generation
        previous = self.get(alert_id)
        if previous is not None:
            self._replace(previous.model_copy(update={"resolved": True}))

        try:
            await self.gateway.alerts.resolve(alert_id)
        except Exception as e:
            if previous is not None and generation == self._generation:
                self._replace(previous)
            return self._fail(e, "resolve", RESOLVE_FAILED, alert_id=alert_id)

        self.logger.info("Alert resolved", alert_id=alert_id)
        return self._succeed()

    async def dismiss(self, alert_id: AlertId) -> Outcome[None]:
        """Remove an alert from the list, optimistically."""
        generation = self._generation
        index = next(
            (i for i, alert in enumerate(self._alerts) if alert.id == alert_id), None
        )
        preceding = [a.id for a in self._alerts[:index]] if index is not None else []
        previous = self._alerts.pop(index) if index is not None else None

        try:
            await self.gateway.alerts.dismiss(alert_id)
        except Exception as e:
            if (
                previous is not None
                and generation == self._generation
                and self.get(alert_id) is None
            ):
                self._alerts.insert(self._restore_position(preceding), previous)
            return self._fail(e, "dismiss", DISMISS_FAILED, alert_id=alert_id)

        self.logger.info("Alert dismissed", alert_id=alert_id)
        return self._succeed()

    def _restore_position(self, preceding: "list[AlertId]") -> int:
        """Index just after the nearest earlier neighbour still listed."""
        positions = {alert.id: i for i, alert in enumerate(self._alerts)}
        for alert_id in reversed(preceding):
            if alert_id in positions:
                return positions[alert_id] + 1
        return 0

    def _replace(self, alert: Alert) -> None:
        self._alerts = [alert if a.id == alert.id else a for a in self._alerts]
